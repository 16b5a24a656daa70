"""
Fail-soft inventory deduction.

A stock-accounting fault must never block production, so the only outcomes
are OK and WARNING.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from ..adapters.inventory_adapter import InventoryAdapterInterface, MaterialInventoryAdapter

logger = logging.getLogger(__name__)

DEDUCTION_FAILED_WARNING = 'Inventory deduction failed - please verify stock levels manually.'


@dataclass(frozen=True)
class DeductionResult:
    """Outcome of a deduction attempt. There is no fatal variant."""

    is_warning: bool
    deducted_count: int = 0
    reason: Optional[str] = None

    @classmethod
    def ok(cls, deducted_count: int = 0) -> 'DeductionResult':
        return cls(is_warning=False, deducted_count=deducted_count)

    @classmethod
    def warning(cls, reason: str) -> 'DeductionResult':
        return cls(is_warning=True, reason=reason)

    @property
    def warning_message(self) -> Optional[str]:
        return DEDUCTION_FAILED_WARNING if self.is_warning else None


class InventoryDeductionService:
    """Runs an inventory adapter and converts any failure into a warning."""

    def __init__(self, adapter: InventoryAdapterInterface = None):
        self.adapter = adapter or MaterialInventoryAdapter()

    def deduct(self, organization_id, order_id, actor_id=None) -> DeductionResult:
        """
        Deduct stock for an order entering production.

        Runs inside a savepoint so a failed deduction rolls back its own
        writes without aborting the caller's transaction.

        Args:
            organization_id: Owning organization UUID
            order_id: Order UUID
            actor_id: User triggering the deduction

        Returns:
            DeductionResult.ok(count) or DeductionResult.warning(reason)
        """
        try:
            with transaction.atomic():
                deducted = self.adapter.deduct_for_order(organization_id, order_id, actor_id)
        except Exception as e:
            logger.exception(f"Inventory deduction failed for order {order_id}: {e}")
            return DeductionResult.warning(str(e) or e.__class__.__name__)

        return DeductionResult.ok(deducted or 0)
