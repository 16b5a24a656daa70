"""
Order Lifecycle Services
"""

from .transition_validator import (
    TransitionContext, ValidationResult,
    validate_transition, validate_state_transition, validate_order_edit,
    get_allowed_next_statuses, get_allowed_next_states,
    is_terminal_status, is_terminal_state,
    canonical_to_legacy, legacy_to_canonical, determine_routing_target,
)
from .audit_logger import AuditLogger
from .inventory_deduction import InventoryDeductionService, DeductionResult
from .order_state_service import OrderStateService, TransitionResult, get_order_state_service
from .status_pill_service import StatusPillService

__all__ = [
    # Transition rules
    'TransitionContext', 'ValidationResult',
    'validate_transition', 'validate_state_transition', 'validate_order_edit',
    'get_allowed_next_statuses', 'get_allowed_next_states',
    'is_terminal_status', 'is_terminal_state',
    'canonical_to_legacy', 'legacy_to_canonical', 'determine_routing_target',

    # Services
    'AuditLogger', 'InventoryDeductionService', 'DeductionResult',
    'OrderStateService', 'TransitionResult', 'get_order_state_service',
    'StatusPillService',
]
