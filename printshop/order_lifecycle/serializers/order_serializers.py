"""
Order serializers for the Order Lifecycle.
"""

from rest_framework import serializers

from ..models import (
    Order, OrderLineItem, OrderAuditLog, LineItemStatus, OrderPriority, ShippingMethod,
)


class OrderLineItemSerializer(serializers.ModelSerializer):
    """Serializer for OrderLineItem model."""

    is_finished = serializers.BooleanField(read_only=True)

    class Meta:
        model = OrderLineItem
        fields = [
            'id', 'description', 'quantity', 'sqft', 'total_sheets', 'material',
            'requires_inventory', 'status', 'is_finished', 'sort_order',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Serializer for order listing."""

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer_name', 'status', 'state',
            'status_pill_value', 'priority', 'due_date', 'shipping_method',
            'fulfillment_status', 'created_at'
        ]
        read_only_fields = fields


class OrderDetailSerializer(serializers.ModelSerializer):
    """Detailed serializer for a single order."""

    line_items = OrderLineItemSerializer(many=True, read_only=True)
    line_items_count = serializers.SerializerMethodField()
    is_pickup = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer_name', 'status', 'state',
            'fulfillment_status', 'shipping_method', 'is_pickup', 'routing_target',
            'status_pill_value', 'priority', 'due_date', 'promised_date',
            'started_production_at', 'production_completed_at', 'shipped_at',
            'closed_at', 'canceled_at', 'cancellation_reason',
            'bill_to_name', 'bill_to_company', 'bill_to_address1', 'bill_to_city',
            'bill_to_postal_code', 'ship_to_name', 'ship_to_company',
            'ship_to_address1', 'ship_to_city', 'ship_to_postal_code',
            'notes', 'line_items', 'line_items_count', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_line_items_count(self, obj):
        return obj.line_items.count()


class OrderAuditEntrySerializer(serializers.ModelSerializer):
    """Serializer for order audit entries."""

    class Meta:
        model = OrderAuditLog
        fields = [
            'id', 'action_type', 'from_status', 'to_status', 'note',
            'metadata', 'actor', 'actor_user_name', 'created_at'
        ]
        read_only_fields = fields


class TransitionRequestSerializer(serializers.Serializer):
    """Body of POST orders/{id}/transition/."""

    toStatus = serializers.CharField(max_length=30)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StateTransitionRequestSerializer(serializers.Serializer):
    """Body of PATCH orders/{id}/state/."""

    nextState = serializers.CharField(max_length=30)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CompleteProductionRequestSerializer(serializers.Serializer):
    """Body of POST orders/{id}/complete-production/."""

    autoMarkRemainingDone = serializers.BooleanField(required=False, default=False)


class StatusPillAssignSerializer(serializers.Serializer):
    """Body of PATCH orders/{id}/status-pill/; null or empty clears the pill."""

    value = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    statusPillValue = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)

    def validate(self, attrs):
        attrs['value'] = attrs.get('value', attrs.get('statusPillValue'))
        return attrs


class BulkLineItemStatusSerializer(serializers.Serializer):
    """Body of POST orders/{id}/line-items/bulk-status/."""

    status = serializers.ChoiceField(choices=LineItemStatus.choices)
    lineItemIds = serializers.ListField(
        child=serializers.UUIDField(), required=False, allow_null=True, allow_empty=False
    )


class OrderDetailsUpdateSerializer(serializers.Serializer):
    """Body of PATCH orders/{id}/details/."""

    priority = serializers.ChoiceField(choices=OrderPriority.choices, required=False)
    dueDate = serializers.DateField(source='due_date', required=False, allow_null=True)
    promisedDate = serializers.DateField(source='promised_date', required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    shippingMethod = serializers.ChoiceField(
        source='shipping_method', choices=ShippingMethod.choices, required=False
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one editable field is required")
        return attrs
