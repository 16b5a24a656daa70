"""
Django admin configuration for the Order Lifecycle.
"""

from django.contrib import admin
from .models import (
    Order, OrderLineItem, OrderAttachment, ProductionJob, OrderStatusPill,
    OrderAuditLog, AuditLog,
)


class OrderLineItemInline(admin.TabularInline):
    model = OrderLineItem
    extra = 0
    can_delete = False
    fields = ['description', 'quantity', 'material', 'requires_inventory', 'status']
    readonly_fields = ['status']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'organization', 'state', 'status', 'status_pill_value', 'priority', 'created_at']
    list_filter = ['state', 'status', 'priority', 'shipping_method']
    search_fields = ['order_number', 'customer_name']
    # Lifecycle fields change only through OrderStateService.
    readonly_fields = [
        'id', 'organization', 'status', 'state', 'routing_target', 'started_production_at',
        'production_completed_at', 'shipped_at', 'closed_at', 'canceled_at', 'created_at', 'updated_at'
    ]
    inlines = [OrderLineItemInline]

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderLineItem)
class OrderLineItemAdmin(admin.ModelAdmin):
    list_display = ['order', 'description', 'quantity', 'status', 'requires_inventory']
    list_filter = ['status']
    search_fields = ['description', 'order__order_number']
    readonly_fields = ['id', 'status']


@admin.register(OrderAttachment)
class OrderAttachmentAdmin(admin.ModelAdmin):
    list_display = ['order', 'file_name', 'created_at']
    search_fields = ['file_name', 'order__order_number']


@admin.register(ProductionJob)
class ProductionJobAdmin(admin.ModelAdmin):
    list_display = ['order', 'line_item', 'status', 'created_at']
    list_filter = ['status']


@admin.register(OrderStatusPill)
class OrderStatusPillAdmin(admin.ModelAdmin):
    list_display = ['name', 'organization', 'state_scope', 'is_default', 'is_active', 'sort_order']
    list_filter = ['state_scope', 'is_default', 'is_active']
    search_fields = ['name']


class ReadOnlyAuditAdmin(admin.ModelAdmin):

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(OrderAuditLog)
class OrderAuditLogAdmin(ReadOnlyAuditAdmin):
    list_display = ['order', 'action_type', 'from_status', 'to_status', 'actor_user_name', 'created_at']
    list_filter = ['action_type', 'created_at']
    search_fields = ['order__order_number', 'actor_user_name']


@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAuditAdmin):
    list_display = ['entity_type', 'entity_name', 'action', 'user_name', 'timestamp']
    list_filter = ['entity_type', 'action', 'timestamp']
    search_fields = ['entity_id', 'entity_name', 'user_name']
