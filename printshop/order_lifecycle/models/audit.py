"""
Audit log models for the order lifecycle.

Both models are append-only: rows are inserted once and never updated or
deleted through the ORM.
"""

import uuid
from decimal import Decimal
from datetime import date, datetime
from django.db import models
from django.conf import settings
from django.utils import timezone

from organizations.models import OrganizationScopedQuerySet


class AppendOnlyViolation(Exception):
    """Raised on any attempt to modify or delete an audit record."""


def make_json_safe(obj):
    """Convert Decimals, dates and UUIDs nested in audit payloads to strings."""
    if isinstance(obj, dict):
        return {k: make_json_safe(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [make_json_safe(item) for item in obj]
    elif isinstance(obj, (Decimal, uuid.UUID)):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    else:
        return obj


class AppendOnlyQuerySet(OrganizationScopedQuerySet):

    def update(self, **kwargs):
        raise AppendOnlyViolation(f"{self.model.__name__} rows cannot be updated")

    def delete(self):
        raise AppendOnlyViolation(f"{self.model.__name__} rows cannot be deleted")


class AppendOnlyModel(models.Model):

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AppendOnlyViolation(f"{type(self).__name__} {self.pk} is immutable")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AppendOnlyViolation(f"{type(self).__name__} {self.pk} cannot be deleted")


class OrderAuditAction(models.TextChoices):
    STATUS_TRANSITION = 'status_transition', 'Status Transition'
    PRIORITY_CHANGE = 'priority_change', 'Priority Change'
    BULK_LINE_ITEM_STATUS_UPDATE = 'bulk_line_item_status_update', 'Bulk Line Item Status Update'
    STATUS_PILL_CHANGED = 'status_pill_changed', 'Status Pill Changed'
    ORDER_UPDATED = 'order_updated', 'Order Updated'


class OrderAuditLog(AppendOnlyModel):
    """
    Operational log of everything that happened to one order.

    Written by the order state service and the status pill service inside
    the same transaction as the change it describes.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.PROTECT,
        related_name='order_audit_entries',
    )
    order = models.ForeignKey(
        'order_lifecycle.Order',
        on_delete=models.PROTECT,
        related_name='audit_entries',
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_audit_entries',
    )
    actor_user_name = models.CharField(max_length=200, default='System')
    action_type = models.CharField(max_length=50, choices=OrderAuditAction.choices)
    from_status = models.CharField(max_length=100, null=True, blank=True)
    to_status = models.CharField(max_length=100, null=True, blank=True)
    note = models.TextField(null=True, blank=True)
    metadata = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['order', 'created_at'], name='order_audit_order_created_idx'),
            models.Index(fields=['action_type'], name='order_audit_action_idx'),
        ]

    def __str__(self):
        return f"{self.action_type} on {self.order_id} by {self.actor_user_name}"


class AuditAction(models.TextChoices):
    CREATE = 'CREATE', 'Create'
    UPDATE = 'UPDATE', 'Update'
    DELETE = 'DELETE', 'Delete'


class AuditLog(AppendOnlyModel):
    """
    Generic entity audit trail shared by every mutating endpoint.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.PROTECT,
        related_name='audit_logs',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
    )
    user_name = models.CharField(max_length=200, default='System')
    action = models.CharField(max_length=20, choices=AuditAction.choices)
    entity_type = models.CharField(max_length=50, help_text="Type of entity (order, status_pill, ...)")
    entity_id = models.CharField(max_length=64)
    entity_name = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    old_values = models.JSONField(default=dict, blank=True)
    new_values = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(default=timezone.now)

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['entity_type', 'entity_id', '-timestamp'], name='audit_entity_ts_idx'),
            models.Index(fields=['organization', '-timestamp'], name='audit_org_ts_idx'),
        ]

    def __str__(self):
        return f"{self.entity_type} {self.entity_id} - {self.action} by {self.user_name} at {self.timestamp}"
