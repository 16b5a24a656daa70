import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F

from inventory.models import InventoryAdjustment, Material

logger = logging.getLogger(__name__)


class StockService:
    """
    Service for managing material stock quantities.
    """

    @transaction.atomic
    def adjust_inventory(self, organization_id, material_id, adjustment_type, quantity_change,
                         user_id=None, reason="", order=None):
        """
        Record an inventory adjustment and apply it to the material's stock.

        Args:
            organization_id: Owning organization UUID
            material_id: Material primary key
            adjustment_type: One of InventoryAdjustment.TYPE_CHOICES
            quantity_change: Signed amount (negative deducts)
            user_id: User performing the adjustment
            reason: Free-text reason
            order: Order the adjustment belongs to, if any

        Returns:
            InventoryAdjustment instance

        Raises:
            Material.DoesNotExist: If the material is not owned by the organization
        """
        material = Material.objects.for_organization(organization_id).get(id=material_id)
        quantity_change = Decimal(str(quantity_change))

        adjustment = InventoryAdjustment.objects.create(
            organization_id=organization_id,
            material=material,
            type=adjustment_type,
            quantity_change=quantity_change,
            reason=reason or "",
            order=order,
            user_id=user_id,
        )

        material.stock_quantity = F("stock_quantity") + quantity_change
        material.save(update_fields=["stock_quantity", "updated_at"])

        logger.debug(f"Material {material.sku} adjusted by {quantity_change} ({adjustment_type})")
        return adjustment

    def get_adjustments(self, organization_id, material_id):
        """
        Get adjustment history for a material, newest first.
        """
        return (
            InventoryAdjustment.objects.for_organization(organization_id)
            .filter(material_id=material_id)
            .select_related("material")
        )
