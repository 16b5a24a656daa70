"""
Order line item model.
"""

import uuid
from decimal import Decimal
from django.db import models
from django.utils import timezone

from organizations.models import OrganizationScopedQuerySet


class LineItemStatus(models.TextChoices):
    """Production status of a line item: queued -> printing -> finishing -> done."""
    QUEUED = 'queued', 'Queued'
    PRINTING = 'printing', 'Printing'
    FINISHING = 'finishing', 'Finishing'
    DONE = 'done', 'Done'
    CANCELED = 'canceled', 'Canceled'


# Statuses that count as finished when gating order completion.
FINISHED_LINE_ITEM_STATUSES = (LineItemStatus.DONE, LineItemStatus.CANCELED)


class OrderLineItemQuerySet(OrganizationScopedQuerySet):

    def unfinished(self):
        return self.exclude(status__in=FINISHED_LINE_ITEM_STATUSES)


class OrderLineItem(models.Model):
    """
    A printed item on an order.

    Carries its own organization so line-item reads are scoped the same way
    orders are.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.CASCADE,
        related_name='order_line_items',
    )
    order = models.ForeignKey(
        'order_lifecycle.Order',
        on_delete=models.CASCADE,
        related_name='line_items',
    )
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    sqft = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        help_text="Total printed area in square feet"
    )
    total_sheets = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Sheets required, from the nesting snapshot"
    )
    material = models.ForeignKey(
        'inventory.Material',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='line_items',
    )
    requires_inventory = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=LineItemStatus.choices,
        default=LineItemStatus.QUEUED,
    )
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderLineItemQuerySet.as_manager()

    class Meta:
        ordering = ['order', 'sort_order', 'created_at']
        indexes = [
            models.Index(fields=['order', 'status'], name='line_items_order_status_idx'),
        ]

    def __str__(self):
        return f"{self.description} x{self.quantity} ({self.status})"

    @property
    def is_finished(self):
        return self.status in FINISHED_LINE_ITEM_STATUSES
