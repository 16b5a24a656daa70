from django.contrib import admin

from .models import InventoryAdjustment, Material, OrderMaterialUsage


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ["sku", "name", "organization", "type", "stock_quantity", "unit_of_measure"]
    list_filter = ["type", "organization"]
    search_fields = ["sku", "name"]


@admin.register(InventoryAdjustment)
class InventoryAdjustmentAdmin(admin.ModelAdmin):
    list_display = ["material", "type", "quantity_change", "order", "user", "created_at"]
    list_filter = ["type", "created_at"]
    search_fields = ["material__sku", "reason"]
    readonly_fields = ["created_at"]


@admin.register(OrderMaterialUsage)
class OrderMaterialUsageAdmin(admin.ModelAdmin):
    list_display = ["order", "order_line_item", "material", "quantity_used", "calculated_by", "created_at"]
    list_filter = ["calculated_by"]
    readonly_fields = ["created_at"]
