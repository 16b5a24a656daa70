"""
Attachment and production-job records.

Only what the lifecycle needs: file storage and job scheduling are handled
elsewhere, these rows feed attachment and job counts into transition checks.
"""

import uuid
from django.conf import settings
from django.db import models
from django.utils import timezone

from organizations.models import OrganizationScopedQuerySet


class OrderAttachment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization', on_delete=models.CASCADE, related_name='order_attachments'
    )
    order = models.ForeignKey('order_lifecycle.Order', on_delete=models.CASCADE, related_name='attachments')
    file_name = models.CharField(max_length=255)
    storage_key = models.CharField(max_length=500, blank=True)
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    created_at = models.DateTimeField(default=timezone.now)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return self.file_name


class ProductionJobStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACTIVE = 'active', 'Active'
    COMPLETE = 'complete', 'Complete'


class ProductionJob(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organization = models.ForeignKey(
        'organizations.Organization', on_delete=models.CASCADE, related_name='production_jobs'
    )
    order = models.ForeignKey('order_lifecycle.Order', on_delete=models.CASCADE, related_name='jobs')
    line_item = models.ForeignKey(
        'order_lifecycle.OrderLineItem', on_delete=models.CASCADE, null=True, blank=True, related_name='jobs'
    )
    status = models.CharField(
        max_length=20, choices=ProductionJobStatus.choices, default=ProductionJobStatus.PENDING
    )
    created_at = models.DateTimeField(default=timezone.now)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"Job {self.id} ({self.status})"
