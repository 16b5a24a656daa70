"""
Status pill serializers for the Order Lifecycle.
"""

from rest_framework import serializers

from ..models import OrderStatusPill


class StatusPillSerializer(serializers.ModelSerializer):
    """Serializer for OrderStatusPill model."""

    class Meta:
        model = OrderStatusPill
        fields = [
            'id', 'state_scope', 'name', 'color', 'is_default', 'is_active',
            'sort_order', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Default-per-scope uniqueness is enforced by StatusPillService.
        validators = []


class StatusPillUpdateSerializer(serializers.ModelSerializer):
    """Serializer for updating a pill; the state scope is fixed at creation."""

    class Meta:
        model = OrderStatusPill
        fields = ['name', 'color', 'is_default', 'is_active', 'sort_order']
