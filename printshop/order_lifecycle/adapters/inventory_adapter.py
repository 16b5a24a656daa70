"""
Inventory Adapter for the Order Lifecycle.

Provides the interface the order state service uses to consume material
stock when an order enters production.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal

from inventory.models import Material, OrderMaterialUsage
from inventory.services import StockService
from ..models import Order, OrderLineItem

logger = logging.getLogger(__name__)


class InventoryAdapterInterface(ABC):
    """
    Interface for inventory accounting integration.

    This abstract base class defines the contract for stock operations
    that the Order Lifecycle system needs.
    """

    @abstractmethod
    def deduct_for_order(self, organization_id, order_id, actor_id=None) -> int:
        """
        Consume stock for every line item of an order that requires inventory.

        Args:
            organization_id: Owning organization UUID
            order_id: Order UUID
            actor_id: User triggering the deduction, if any

        Returns:
            Number of line items deducted on this call
        """
        pass


class MaterialInventoryAdapter(InventoryAdapterInterface):
    """
    Deducts from Material stock via StockService.

    Line items that already have a usage record for the order are skipped, so
    repeating the call does not deduct twice.
    """

    def __init__(self, stock_service: StockService = None):
        self.stock_service = stock_service or StockService()

    @staticmethod
    def quantity_needed(line_item: OrderLineItem, material: Material) -> Decimal:
        """
        Stock consumed by one line item.

        Sheets use the nesting sheet count (falling back to quantity), rolls
        measured in square feet use the printed area, anything else uses
        quantity.
        """
        if material.type == 'sheet':
            return Decimal(line_item.total_sheets or line_item.quantity or 0)
        if material.type == 'roll' and material.unit_of_measure == 'sqft':
            return Decimal(str(line_item.sqft or 0))
        return Decimal(line_item.quantity or 0)

    def deduct_for_order(self, organization_id, order_id, actor_id=None) -> int:
        order = Order.objects.for_organization(organization_id).get(id=order_id)
        line_items = (
            OrderLineItem.objects.for_organization(organization_id)
            .filter(order_id=order_id, requires_inventory=True, material__isnull=False)
        )
        already_used = set(
            OrderMaterialUsage.objects.for_organization(organization_id)
            .filter(order_id=order_id)
            .values_list('order_line_item_id', flat=True)
        )

        deducted = 0
        for line_item in line_items:
            if line_item.id in already_used:
                continue

            material = (
                Material.objects.for_organization(organization_id)
                .filter(id=line_item.material_id)
                .first()
            )
            if material is None:
                continue

            quantity = self.quantity_needed(line_item, material)
            if quantity <= 0:
                continue

            OrderMaterialUsage.objects.create(
                organization_id=organization_id,
                order=order,
                order_line_item=line_item,
                material=material,
                quantity_used=quantity,
                unit_of_measure=material.unit_of_measure,
                calculated_by='auto',
            )
            self.stock_service.adjust_inventory(
                organization_id,
                material.id,
                'job_usage',
                -quantity,
                user_id=actor_id,
                reason=f"Auto-deducted for order {order.order_number}, line item: {line_item.description}",
                order=order,
            )
            deducted += 1

        logger.info(f"Deducted inventory for {deducted} line item(s) of order {order.order_number}")
        return deducted
