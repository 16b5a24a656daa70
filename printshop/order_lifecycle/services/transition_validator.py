"""
Transition rules for the order lifecycle.

Everything here is a pure function of its arguments: no database access, no
clock, no settings lookups. Organization preferences arrive inside the
TransitionContext.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from organizations.preferences import OrderPreferences
from ..models import FulfillmentStatus, OrderState, OrderStatus, RoutingTarget, ShippingMethod


# Legacy status graph
ALLOWED_STATUS_TRANSITIONS = {
    OrderStatus.NEW: [OrderStatus.IN_PRODUCTION, OrderStatus.ON_HOLD, OrderStatus.CANCELED],
    OrderStatus.IN_PRODUCTION: [OrderStatus.READY_FOR_SHIPMENT, OrderStatus.ON_HOLD, OrderStatus.CANCELED],
    OrderStatus.ON_HOLD: [OrderStatus.IN_PRODUCTION, OrderStatus.CANCELED],
    OrderStatus.READY_FOR_SHIPMENT: [OrderStatus.COMPLETED, OrderStatus.ON_HOLD],
    OrderStatus.COMPLETED: [],  # Final state
    OrderStatus.CANCELED: [],  # Final state
}

# Canonical state graph
ALLOWED_STATE_TRANSITIONS = {
    OrderState.OPEN: [OrderState.PRODUCTION_COMPLETE, OrderState.CANCELED],
    OrderState.PRODUCTION_COMPLETE: [OrderState.SHIPPED, OrderState.CLOSED, OrderState.CANCELED],
    OrderState.SHIPPED: [OrderState.CLOSED],
    OrderState.CLOSED: [],  # Final state
    OrderState.CANCELED: [],  # Final state
}

TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELED})
TERMINAL_STATES = frozenset({OrderState.CLOSED, OrderState.CANCELED})

_STATE_TO_LEGACY = {
    OrderState.OPEN: OrderStatus.IN_PRODUCTION,
    OrderState.PRODUCTION_COMPLETE: OrderStatus.READY_FOR_SHIPMENT,
    # The legacy enum has no shipped value; shipped orders still read as awaiting completion.
    OrderState.SHIPPED: OrderStatus.READY_FOR_SHIPMENT,
    OrderState.CLOSED: OrderStatus.COMPLETED,
    OrderState.CANCELED: OrderStatus.CANCELED,
}

_LEGACY_TO_STATE = {
    OrderStatus.NEW: OrderState.OPEN,
    OrderStatus.IN_PRODUCTION: OrderState.OPEN,
    OrderStatus.ON_HOLD: OrderState.OPEN,
    OrderStatus.READY_FOR_SHIPMENT: OrderState.PRODUCTION_COMPLETE,
    OrderStatus.COMPLETED: OrderState.CLOSED,
    OrderStatus.CANCELED: OrderState.CANCELED,
}

_SHIPPED_FULFILLMENT = (FulfillmentStatus.SHIPPED, FulfillmentStatus.DELIVERED)

NO_ATTACHMENTS_WARNING = 'No artwork/files attached - production may be delayed.'
ACTIVE_JOBS_WARNING = (
    'Order has active production jobs - verify all work is complete before marking ready for shipment.'
)
NOT_SHIPPED_WARNING = 'Order has not been shipped yet - consider updating fulfillment status first.'
FULFILLMENT_NOT_SHIPPED_WARNING = 'Fulfillment has not been marked shipped - confirm the shipment went out.'


@dataclass(frozen=True)
class TransitionContext:
    """Facts about an order that transition rules depend on."""

    line_items_count: int = 0
    incomplete_line_items_count: int = 0
    attachments_count: int = 0
    jobs_count: int = 0
    fulfillment_status: Optional[str] = None
    has_shipped_at: bool = False
    has_due_date: bool = False
    has_billing_address: bool = False
    has_shipping_address: bool = False
    shipping_method: Optional[str] = None
    auto_mark_remaining_done: bool = False
    preferences: OrderPreferences = field(default_factory=OrderPreferences)


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    code: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, warnings: Optional[List[str]] = None) -> 'ValidationResult':
        return cls(ok=True, warnings=list(warnings or []))

    @classmethod
    def reject(cls, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> 'ValidationResult':
        return cls(ok=False, code=code, message=message, details=dict(details or {}))


def get_allowed_next_statuses(current_status: str, current_state: Optional[str] = None) -> List[str]:
    """
    Legacy statuses reachable from current_status.

    When current_state is given, statuses whose canonical state is not a
    permitted move from current_state are left out.
    """
    allowed = [str(s) for s in ALLOWED_STATUS_TRANSITIONS.get(current_status, [])]
    if current_state is None:
        return allowed

    next_states = ALLOWED_STATE_TRANSITIONS.get(current_state, [])
    return [
        s for s in allowed
        if _LEGACY_TO_STATE[s] == current_state or _LEGACY_TO_STATE[s] in next_states
    ]


def get_allowed_next_states(current_state: str) -> List[str]:
    return [str(s) for s in ALLOWED_STATE_TRANSITIONS.get(current_state, [])]


def is_terminal_status(status: str) -> bool:
    return status in TERMINAL_STATUSES


def is_terminal_state(state: str) -> bool:
    return state in TERMINAL_STATES


def canonical_to_legacy(state: str) -> str:
    """
    Map a canonical state to the legacy status stored alongside it.

    Raises:
        ValueError: If the state is unknown
    """
    try:
        return str(_STATE_TO_LEGACY[state])
    except KeyError:
        raise ValueError(f"Unknown order state: {state}")


def legacy_to_canonical(status: str) -> str:
    """
    Map a legacy status to its canonical state.

    Raises:
        ValueError: If the status is unknown
    """
    try:
        return str(_LEGACY_TO_STATE[status])
    except KeyError:
        raise ValueError(f"Unknown order status: {status}")


def determine_routing_target(shipping_method: Optional[str]) -> str:
    """Pickup orders go straight to invoicing; everything else goes to fulfillment."""
    if shipping_method == ShippingMethod.PICKUP:
        return str(RoutingTarget.INVOICING)
    return str(RoutingTarget.FULFILLMENT)


def _is_pickup(ctx: TransitionContext) -> bool:
    return ctx.shipping_method == ShippingMethod.PICKUP


def _check_production_readiness(ctx: TransitionContext, action: str) -> Optional[ValidationResult]:
    """Apply the organization's due-date and address requirements."""
    prefs = ctx.preferences

    if prefs.require_due_date_for_production and not ctx.has_due_date:
        return ValidationResult.reject(
            'NO_DUE_DATE', f'Cannot {action}: Order must have a due date set.'
        )

    if prefs.require_billing_address_for_production and not ctx.has_billing_address:
        return ValidationResult.reject(
            'NO_BILLING_ADDRESS', f'Cannot {action}: Billing address is required.'
        )

    if (prefs.require_shipping_address_for_production
            and not ctx.has_shipping_address
            and not _is_pickup(ctx)):
        return ValidationResult.reject(
            'NO_SHIPPING_ADDRESS',
            f'Cannot {action}: Shipping address is required for non-pickup orders.'
        )

    return None


def _check_line_items_done(ctx: TransitionContext, action: str) -> Optional[ValidationResult]:
    remaining = ctx.incomplete_line_items_count
    if (ctx.preferences.require_all_line_items_done_to_complete
            and remaining > 0
            and not ctx.auto_mark_remaining_done):
        return ValidationResult.reject(
            'LINE_ITEMS_NOT_COMPLETE',
            f'Cannot {action}: {remaining} line item(s) are not done.',
            {'remainingCount': remaining, 'canOverride': True},
        )
    return None


def validate_transition(current_status: str, requested_status: str,
                        ctx: TransitionContext, current_state: Optional[str] = None) -> ValidationResult:
    """
    Validate a legacy status transition.

    The legacy move must also be a legal move in the canonical state graph,
    so entering ready_for_shipment is held to the production-complete rules.

    Args:
        current_status: The order's current legacy status
        requested_status: The legacy status being requested
        ctx: Order facts and organization preferences
        current_state: The order's stored canonical state; derived from
            current_status when omitted

    Returns:
        ValidationResult; rejections carry a stable code, warnings never block
    """
    if current_status == OrderStatus.COMPLETED:
        return ValidationResult.reject(
            'TERMINAL_STATE',
            'Completed orders cannot be changed. Contact an administrator if this order needs to be modified.'
        )

    if current_status == OrderStatus.CANCELED:
        return ValidationResult.reject(
            'TERMINAL_STATE',
            'Canceled orders cannot be changed. Create a new order if needed.'
        )

    if current_status not in ALLOWED_STATUS_TRANSITIONS:
        return ValidationResult.reject('UNKNOWN_STATUS', f'Unknown order status: {current_status}')

    if requested_status not in ALLOWED_STATUS_TRANSITIONS:
        return ValidationResult.reject('UNKNOWN_STATUS', f'Unknown order status: {requested_status}')

    if current_state is None:
        current_state = legacy_to_canonical(current_status)

    if is_terminal_state(current_state):
        return ValidationResult.reject(
            'TERMINAL_STATE', f'Cannot transition from {current_state} state.'
        )

    if current_state not in ALLOWED_STATE_TRANSITIONS:
        return ValidationResult.reject('UNKNOWN_STATE', f'Unknown order state: {current_state}')

    if current_status == requested_status:
        return ValidationResult.reject('SAME_STATUS', f'Order is already in {requested_status} status.')

    allowed = get_allowed_next_statuses(current_status, current_state)
    if requested_status not in allowed:
        return ValidationResult.reject(
            'INVALID_TRANSITION',
            f"Cannot transition from {current_status} to {requested_status}. "
            f"Valid options: {', '.join(allowed) or 'none'}.",
            {'allowed': allowed, 'currentState': current_state},
        )

    warnings = []
    next_state = legacy_to_canonical(requested_status)

    if requested_status == OrderStatus.IN_PRODUCTION:
        if ctx.line_items_count == 0:
            return ValidationResult.reject(
                'NO_LINE_ITEMS', 'Cannot start production: Order must have at least one line item.'
            )

        rejection = _check_production_readiness(ctx, 'start production')
        if rejection:
            return rejection

        if ctx.attachments_count == 0:
            warnings.append(NO_ATTACHMENTS_WARNING)

    elif next_state == OrderState.PRODUCTION_COMPLETE and current_state != OrderState.PRODUCTION_COMPLETE:
        rejection = (_check_production_readiness(ctx, 'mark ready for shipment')
                     or _check_line_items_done(ctx, 'mark ready for shipment'))
        if rejection:
            return rejection

        if ctx.jobs_count > 0:
            warnings.append(ACTIVE_JOBS_WARNING)

    elif requested_status == OrderStatus.COMPLETED:
        if (ctx.preferences.require_all_line_items_done_to_complete
                and ctx.incomplete_line_items_count > 0):
            count = ctx.incomplete_line_items_count
            return ValidationResult.reject(
                'LINE_ITEMS_NOT_COMPLETE',
                f'Cannot complete order: {count} line item(s) are not finished.',
                {'incompleteCount': count},
            )

        has_shipped = ctx.has_shipped_at or ctx.fulfillment_status in _SHIPPED_FULFILLMENT
        if not _is_pickup(ctx) and not has_shipped:
            warnings.append(NOT_SHIPPED_WARNING)

    return ValidationResult.success(warnings)


def validate_state_transition(current_state: str, next_state: str,
                              ctx: TransitionContext) -> ValidationResult:
    """
    Validate a canonical state transition.

    Args:
        current_state: The order's current canonical state
        next_state: The canonical state being requested
        ctx: Order facts and organization preferences

    Returns:
        ValidationResult; LINE_ITEMS_NOT_COMPLETE carries remainingCount and canOverride
    """
    if is_terminal_state(current_state):
        return ValidationResult.reject(
            'TERMINAL_STATE', f'Cannot transition from {current_state} state.'
        )

    if current_state not in ALLOWED_STATE_TRANSITIONS:
        return ValidationResult.reject('UNKNOWN_STATE', f'Unknown order state: {current_state}')

    if next_state not in ALLOWED_STATE_TRANSITIONS:
        return ValidationResult.reject('UNKNOWN_STATE', f'Unknown order state: {next_state}')

    if current_state == next_state:
        return ValidationResult.reject('SAME_STATE', f'Order is already in {next_state} state.')

    allowed = get_allowed_next_states(current_state)
    if next_state not in allowed:
        return ValidationResult.reject(
            'INVALID_TRANSITION',
            f"Cannot transition from {current_state} to {next_state}. Allowed: {', '.join(allowed)}",
            {'allowed': allowed},
        )

    warnings = []

    if next_state == OrderState.PRODUCTION_COMPLETE:
        rejection = (_check_production_readiness(ctx, 'complete production')
                     or _check_line_items_done(ctx, 'complete production'))
        if rejection:
            return rejection

    elif next_state == OrderState.SHIPPED:
        if not ctx.has_shipped_at and ctx.fulfillment_status not in _SHIPPED_FULFILLMENT:
            warnings.append(FULFILLMENT_NOT_SHIPPED_WARNING)

    return ValidationResult.success(warnings)


def validate_order_edit(current_state: str, actor_is_elevated: bool,
                        preferences: OrderPreferences) -> ValidationResult:
    """
    Decide whether an order's fields may be edited.

    Closed and canceled orders are locked unless an owner/admin edits them and
    the organization allows completed-order edits.
    """
    if not is_terminal_state(current_state):
        return ValidationResult.success()

    if not actor_is_elevated:
        return ValidationResult.reject('ORDER_LOCKED', 'Cannot edit completed or canceled orders')

    if not preferences.allow_completed_order_edits:
        return ValidationResult.reject(
            'ORDER_LOCKED_SETTING_DISABLED',
            "Editing completed/canceled orders is disabled. "
            "Enable 'Allow Completed Order Edits' in organization settings."
        )

    return ValidationResult.success()
