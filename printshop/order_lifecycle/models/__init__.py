"""
Order Lifecycle Models
"""

from .order import (
    Order, OrderStatus, OrderState, FulfillmentStatus, ShippingMethod,
    RoutingTarget, OrderPriority, OrganizationChangeError,
)
from .order_item import OrderLineItem, LineItemStatus, FINISHED_LINE_ITEM_STATUSES
from .production import OrderAttachment, ProductionJob, ProductionJobStatus
from .status_pill import OrderStatusPill
from .audit import (
    OrderAuditLog, OrderAuditAction, AuditLog, AuditAction, AppendOnlyViolation,
)

__all__ = [
    # Order models
    'Order', 'OrderStatus', 'OrderState', 'FulfillmentStatus', 'ShippingMethod',
    'RoutingTarget', 'OrderPriority', 'OrganizationChangeError',
    'OrderLineItem', 'LineItemStatus', 'FINISHED_LINE_ITEM_STATUSES',

    # Production inputs
    'OrderAttachment', 'ProductionJob', 'ProductionJobStatus',

    # Status pills
    'OrderStatusPill',

    # Audit
    'OrderAuditLog', 'OrderAuditAction', 'AuditLog', 'AuditAction', 'AppendOnlyViolation',
]
