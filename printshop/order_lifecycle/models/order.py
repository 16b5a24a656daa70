"""
Order model for the order lifecycle.
"""

import uuid
from django.db import models
from django.conf import settings
from django.utils import timezone

from organizations.models import OrganizationScopedQuerySet


class OrderStatus(models.TextChoices):
    """Legacy order status, kept for older consumers. Derived from OrderState."""
    NEW = 'new', 'New'
    IN_PRODUCTION = 'in_production', 'In Production'
    ON_HOLD = 'on_hold', 'On Hold'
    READY_FOR_SHIPMENT = 'ready_for_shipment', 'Ready for Shipment'
    COMPLETED = 'completed', 'Completed'
    CANCELED = 'canceled', 'Canceled'


class OrderState(models.TextChoices):
    """Canonical lifecycle state. CLOSED and CANCELED are absorbing."""
    OPEN = 'open', 'Open'
    PRODUCTION_COMPLETE = 'production_complete', 'Production Complete'
    SHIPPED = 'shipped', 'Shipped'
    CLOSED = 'closed', 'Closed'
    CANCELED = 'canceled', 'Canceled'


class FulfillmentStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PACKED = 'packed', 'Packed'
    SHIPPED = 'shipped', 'Shipped'
    DELIVERED = 'delivered', 'Delivered'


class ShippingMethod(models.TextChoices):
    SHIP = 'ship', 'Ship'
    DELIVER = 'deliver', 'Deliver'
    PICKUP = 'pickup', 'Customer Pickup'


class RoutingTarget(models.TextChoices):
    """Where a finished order goes next: shipping or straight to invoicing (pickup)."""
    FULFILLMENT = 'fulfillment', 'Fulfillment'
    INVOICING = 'invoicing', 'Invoicing'


class OrderPriority(models.TextChoices):
    RUSH = 'rush', 'Rush'
    NORMAL = 'normal', 'Normal'
    LOW = 'low', 'Low'


class OrganizationChangeError(ValueError):
    """Raised when code tries to move an order to another organization."""


class Order(models.Model):
    """
    Aggregate root of the print-shop order lifecycle.

    ``status`` and ``state`` are stored as separate columns. Only the order
    state service writes them, always as a pair.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.CASCADE,
        related_name='orders',
        help_text="Owning organization (immutable after creation)"
    )
    order_number = models.CharField(max_length=50)
    customer_name = models.CharField(max_length=200, blank=True)

    # Lifecycle
    status = models.CharField(
        max_length=30,
        choices=OrderStatus.choices,
        default=OrderStatus.NEW,
        help_text="Legacy status kept in sync with state"
    )
    state = models.CharField(
        max_length=30,
        choices=OrderState.choices,
        default=OrderState.OPEN,
        help_text="Canonical workflow state"
    )
    fulfillment_status = models.CharField(
        max_length=20,
        choices=FulfillmentStatus.choices,
        default=FulfillmentStatus.PENDING,
    )
    shipping_method = models.CharField(
        max_length=20,
        choices=ShippingMethod.choices,
        default=ShippingMethod.SHIP,
    )
    routing_target = models.CharField(
        max_length=20,
        choices=RoutingTarget.choices,
        null=True,
        blank=True,
    )
    status_pill_value = models.CharField(
        max_length=100,
        null=True,
        blank=True,
        help_text="Organization-defined label, independent of state"
    )
    priority = models.CharField(
        max_length=10,
        choices=OrderPriority.choices,
        default=OrderPriority.NORMAL,
    )

    # Dates and milestones (milestones are set once, never reset)
    due_date = models.DateField(null=True, blank=True)
    promised_date = models.DateField(null=True, blank=True)
    started_production_at = models.DateTimeField(null=True, blank=True)
    production_completed_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)
    canceled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)

    # Customer snapshot, copied at creation / customer change
    bill_to_name = models.CharField(max_length=200, blank=True)
    bill_to_company = models.CharField(max_length=200, blank=True)
    bill_to_address1 = models.CharField(max_length=255, blank=True)
    bill_to_city = models.CharField(max_length=100, blank=True)
    bill_to_postal_code = models.CharField(max_length=20, blank=True)
    ship_to_name = models.CharField(max_length=200, blank=True)
    ship_to_company = models.CharField(max_length=200, blank=True)
    ship_to_address1 = models.CharField(max_length=255, blank=True)
    ship_to_city = models.CharField(max_length=100, blank=True)
    ship_to_postal_code = models.CharField(max_length=20, blank=True)

    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_orders',
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='updated_orders',
    )

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'order_number'],
                name='orders_org_order_number_uniq',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'state'], name='orders_org_state_idx'),
            models.Index(fields=['organization', 'status'], name='orders_org_status_idx'),
            models.Index(fields=['created_at'], name='orders_created_at_idx'),
        ]

    def __str__(self):
        return f"Order {self.order_number} - {self.get_state_display()}"

    def save(self, *args, **kwargs):
        if not self._state.adding and self.pk:
            current = (
                type(self).objects
                .filter(pk=self.pk)
                .values_list('organization_id', flat=True)
                .first()
            )
            if current is not None and str(current) != str(self.organization_id):
                raise OrganizationChangeError(f"Order {self.pk} cannot change organization")
        super().save(*args, **kwargs)

    @property
    def is_pickup(self):
        return self.shipping_method == ShippingMethod.PICKUP

    @property
    def has_billing_address(self):
        return bool(self.bill_to_address1)

    @property
    def has_shipping_address(self):
        return bool(self.ship_to_address1)
