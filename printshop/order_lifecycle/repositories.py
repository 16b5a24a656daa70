"""
Tenant-bound data access for orders.

An OrderRepository is constructed for one organization and every query it
issues is filtered by that organization.
"""

from typing import Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import (
    Order, OrderLineItem, OrderAttachment, ProductionJob, ProductionJobStatus,
    OrganizationChangeError,
)


class OrderRepository:

    def __init__(self, organization_id):
        if organization_id is None:
            raise ValueError("OrderRepository requires an organization_id")
        self.organization_id = organization_id

    def _orders(self):
        return Order.objects.for_organization(self.organization_id)

    def _line_items(self, order_id):
        return OrderLineItem.objects.for_organization(self.organization_id).filter(order_id=order_id)

    def get(self, order_id, lock: bool = False) -> Optional[Order]:
        """
        Load an order owned by this organization.

        Args:
            order_id: Order UUID
            lock: Take a row lock (SELECT ... FOR UPDATE); requires an open transaction

        Returns:
            The order, or None when it does not exist in this organization
        """
        queryset = self._orders()
        if lock:
            queryset = queryset.select_for_update()
        try:
            return queryset.filter(id=order_id).first()
        except (ValueError, ValidationError):
            # Malformed ids are indistinguishable from missing ones.
            return None

    def list_line_items(self, order_id) -> List[OrderLineItem]:
        return list(self._line_items(order_id))

    def count_incomplete_line_items(self, order_id) -> int:
        return self._line_items(order_id).unfinished().count()

    def count_attachments(self, order_id) -> int:
        return OrderAttachment.objects.for_organization(self.organization_id).filter(order_id=order_id).count()

    def count_active_jobs(self, order_id) -> int:
        return (
            ProductionJob.objects.for_organization(self.organization_id)
            .filter(order_id=order_id)
            .exclude(status=ProductionJobStatus.COMPLETE)
            .count()
        )

    def count_orders_with_pill(self, pill_value: str) -> int:
        return self._orders().filter(status_pill_value=pill_value).count()

    def update(self, order_id, **patch) -> Optional[Order]:
        """
        Apply a field patch to an order and return the refreshed row.

        Raises:
            OrganizationChangeError: If the patch tries to move the order
        """
        if 'organization' in patch or 'organization_id' in patch:
            raise OrganizationChangeError(f"Order {order_id} cannot change organization")
        patch.setdefault('updated_at', timezone.now())
        updated = self._orders().filter(id=order_id).update(**patch)
        if not updated:
            return None
        return self.get(order_id)

    def bulk_update_line_item_status(self, order_id, line_item_ids: Iterable, status: str) -> int:
        """
        Set the status of the given line items of one order.

        Returns:
            Number of line items updated
        """
        return (
            self._line_items(order_id)
            .filter(id__in=list(line_item_ids))
            .update(status=status, updated_at=timezone.now())
        )
