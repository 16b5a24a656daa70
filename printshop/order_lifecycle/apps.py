from django.apps import AppConfig


class OrderLifecycleConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'order_lifecycle'
    verbose_name = 'Order Lifecycle'
