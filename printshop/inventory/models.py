from django.core.validators import MinValueValidator
from django.db import models

from organizations.models import OrganizationScopedQuerySet


class Material(models.Model):
    TYPE_CHOICES = [
        ("sheet", "Sheet"),
        ("roll", "Roll"),
        ("other", "Other"),
    ]

    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="materials"
    )
    name = models.CharField(max_length=200)
    sku = models.CharField(max_length=100)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default="sheet")
    unit_of_measure = models.CharField(max_length=20, default="sheet")
    # May go negative: production is never blocked on stock accounting.
    stock_quantity = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        db_table = "materials"
        verbose_name = "Material"
        verbose_name_plural = "Materials"
        unique_together = [["organization", "sku"]]
        indexes = [
            models.Index(fields=["organization", "sku"], name="materials_org_sku_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku}) - {self.stock_quantity} {self.unit_of_measure}"


class InventoryAdjustment(models.Model):
    TYPE_CHOICES = [
        ("manual_increase", "Manual Increase"),
        ("manual_decrease", "Manual Decrease"),
        ("waste", "Waste"),
        ("shrinkage", "Shrinkage"),
        ("job_usage", "Job Usage"),
        ("purchase_receipt", "Purchase Receipt"),
    ]

    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="inventory_adjustments"
    )
    material = models.ForeignKey(Material, on_delete=models.PROTECT, related_name="adjustments")
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    quantity_change = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.TextField(blank=True)
    order = models.ForeignKey(
        "order_lifecycle.Order", on_delete=models.SET_NULL, null=True, blank=True, related_name="inventory_adjustments"
    )
    user = models.ForeignKey(
        "users.User", on_delete=models.SET_NULL, null=True, blank=True, related_name="inventory_adjustments"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        db_table = "inventory_adjustments"
        verbose_name = "Inventory Adjustment"
        verbose_name_plural = "Inventory Adjustments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["material", "-created_at"], name="inv_adj_material_created_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.quantity_change} of {self.material.sku}"


class OrderMaterialUsage(models.Model):
    CALCULATED_BY_CHOICES = [
        ("auto", "Automatic"),
        ("manual", "Manual"),
    ]

    organization = models.ForeignKey(
        "organizations.Organization", on_delete=models.CASCADE, related_name="material_usages"
    )
    order = models.ForeignKey("order_lifecycle.Order", on_delete=models.CASCADE, related_name="material_usages")
    order_line_item = models.ForeignKey(
        "order_lifecycle.OrderLineItem", on_delete=models.CASCADE, related_name="material_usages"
    )
    material = models.ForeignKey(Material, on_delete=models.PROTECT, related_name="usages")
    quantity_used = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    unit_of_measure = models.CharField(max_length=20)
    calculated_by = models.CharField(max_length=10, choices=CALCULATED_BY_CHOICES, default="auto")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = OrganizationScopedQuerySet.as_manager()

    class Meta:
        db_table = "order_material_usage"
        verbose_name = "Order Material Usage"
        verbose_name_plural = "Order Material Usage"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "order_line_item"], name="material_usage_order_item_idx"),
        ]

    def __str__(self):
        return f"{self.quantity_used} {self.unit_of_measure} of {self.material.sku} for order {self.order_id}"
