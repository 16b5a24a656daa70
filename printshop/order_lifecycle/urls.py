"""
URL configuration for the Order Lifecycle.

Provides API endpoints for order transitions, status pills and audit trails.
"""

from rest_framework.routers import DefaultRouter

from .views import OrderViewSet, StatusPillViewSet

# Create router and register viewsets
router = DefaultRouter()
router.register(r'orders', OrderViewSet, basename='order')
router.register(r'status-pills', StatusPillViewSet, basename='status-pill')

# URL patterns
urlpatterns = router.urls
