"""
Order Lifecycle Views
"""

from .order_views import OrderViewSet
from .status_pill_views import StatusPillViewSet

__all__ = [
    'OrderViewSet',
    'StatusPillViewSet',
]
