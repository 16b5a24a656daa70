"""
Organization (tenant) model and tenant-scoped query helpers.
"""

import uuid
from django.db import models
from django.utils import timezone


class OrganizationScopedQuerySet(models.QuerySet):
    """
    QuerySet for rows owned by exactly one organization.

    Tenant reads go through ``for_organization``; callers never filter on
    the organization column by hand.
    """

    def for_organization(self, organization_id):
        if organization_id is None:
            raise ValueError("organization_id is required for tenant-scoped queries")
        return self.filter(organization_id=organization_id)


class Organization(models.Model):
    """
    Isolation boundary for every order, line item, pill and audit entry.

    ``settings`` holds organization-level configuration. Order business rules
    live under ``settings["preferences"]["orders"]``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    settings = models.JSONField(
        default=dict,
        blank=True,
        help_text="Organization settings, including order preferences"
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name
