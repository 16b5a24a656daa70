"""
Organization-defined status pills.
"""

import uuid
from django.db import models
from django.db.models import Q
from django.utils import timezone

from organizations.models import OrganizationScopedQuerySet
from .order import OrderState


class OrderStatusPill(models.Model):
    """
    A display label an organization can put on orders in one canonical state.

    Pills never drive workflow rules. At most one pill per
    (organization, state_scope) is the default.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization',
        on_delete=models.CASCADE,
        related_name='order_status_pills',
    )
    state_scope = models.CharField(max_length=30, choices=OrderState.choices)
    name = models.CharField(max_length=100, help_text="Value stored on Order.status_pill_value")
    color = models.CharField(max_length=50, blank=True)
    is_default = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        ordering = ['sort_order', 'name']
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'state_scope'],
                condition=Q(is_default=True),
                name='status_pill_one_default_per_scope',
            ),
        ]
        indexes = [
            models.Index(fields=['organization', 'state_scope'], name='status_pill_org_scope_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.state_scope})"
