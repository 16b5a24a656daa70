"""
Order State Service for the Order Lifecycle.

The only code path that changes an order's status, state, milestones or line
item statuses. Each entry point runs in one database transaction, locks the
order row before validating, and writes its audit entries in that same
transaction.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from organizations.preferences import OrderPreferences, get_organization_preferences
from ..exceptions import OrderNotFoundException, ValidationException
from ..models import (
    AuditAction, LineItemStatus, Order, OrderAuditAction, OrderPriority, OrderState,
    OrderStatus, ShippingMethod,
)
from ..repositories import OrderRepository
from .audit_logger import AuditLogger
from .inventory_deduction import InventoryDeductionService
from .transition_validator import (
    TransitionContext, ValidationResult, canonical_to_legacy, determine_routing_target,
    get_allowed_next_states, get_allowed_next_statuses, is_terminal_state, legacy_to_canonical,
    validate_order_edit, validate_state_transition, validate_transition,
)

logger = logging.getLogger(__name__)

EDITABLE_ORDER_FIELDS = ('priority', 'due_date', 'promised_date', 'notes', 'shipping_method')


@dataclass
class TransitionResult:
    """Outcome of an order state service call."""

    success: bool
    data: Optional[Order] = None
    code: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
    did_auto_mark: bool = False
    auto_marked_count: int = 0

    @classmethod
    def rejected(cls, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> 'TransitionResult':
        return cls(success=False, code=code, message=message, details=dict(details or {}))

    @classmethod
    def from_validation(cls, validation: ValidationResult) -> 'TransitionResult':
        return cls.rejected(validation.code, validation.message, validation.details)

    @classmethod
    def not_found(cls) -> 'TransitionResult':
        return cls.rejected('NOT_FOUND', 'Order not found')


def _actor_id(actor):
    return getattr(actor, 'pk', None) if actor is not None else None


def _is_elevated(actor) -> bool:
    return bool(getattr(actor, 'is_elevated', False))


class OrderStateService:
    """
    Applies lifecycle transitions to orders.

    Collaborators are passed in; tests swap them for doubles through the
    constructor.
    """

    def __init__(self, inventory_deduction: InventoryDeductionService = None,
                 audit_logger: AuditLogger = None,
                 preferences_provider: Callable[[Any], OrderPreferences] = None):
        self.inventory_deduction = inventory_deduction or InventoryDeductionService()
        self.audit_logger = audit_logger or AuditLogger()
        self.preferences_provider = preferences_provider or get_organization_preferences

    # ------------------------------------------------------------------ helpers

    def _build_context(self, repo: OrderRepository, order: Order, preferences: OrderPreferences,
                       auto_mark_remaining_done: bool = False) -> TransitionContext:
        return TransitionContext(
            line_items_count=len(repo.list_line_items(order.id)),
            incomplete_line_items_count=repo.count_incomplete_line_items(order.id),
            attachments_count=repo.count_attachments(order.id),
            jobs_count=repo.count_active_jobs(order.id),
            fulfillment_status=order.fulfillment_status,
            has_shipped_at=order.shipped_at is not None,
            has_due_date=order.due_date is not None,
            has_billing_address=order.has_billing_address,
            has_shipping_address=order.has_shipping_address,
            shipping_method=order.shipping_method,
            auto_mark_remaining_done=auto_mark_remaining_done,
            preferences=preferences,
        )

    def _milestones_for_state(self, order: Order, next_state: str, now, notes: Optional[str]) -> Dict[str, Any]:
        """Timestamp and routing fields to set when an order enters ``next_state``."""
        patch = {}
        if next_state == OrderState.PRODUCTION_COMPLETE:
            if order.production_completed_at is None:
                patch['production_completed_at'] = now
            patch['routing_target'] = determine_routing_target(order.shipping_method)
        elif next_state == OrderState.SHIPPED:
            if order.shipped_at is None:
                patch['shipped_at'] = now
        elif next_state == OrderState.CLOSED:
            if order.closed_at is None:
                patch['closed_at'] = now
        elif next_state == OrderState.CANCELED:
            if order.canceled_at is None:
                patch['canceled_at'] = now
            patch['cancellation_reason'] = notes or ''
        return patch

    def _record_transition(self, organization_id, order: Order, actor, old_values: Dict[str, Any],
                           new_values: Dict[str, Any], from_value: str, to_value: str,
                           note: Optional[str], description: str,
                           metadata: Optional[Dict[str, Any]] = None) -> None:
        self.audit_logger.record_entity(
            organization_id,
            entity_type='order',
            entity_id=order.id,
            actor=actor,
            action=AuditAction.UPDATE,
            entity_name=order.order_number,
            description=description,
            old_values=old_values,
            new_values=new_values,
        )
        self.audit_logger.record_order(
            organization_id,
            order.id,
            OrderAuditAction.STATUS_TRANSITION,
            actor=actor,
            from_status=from_value,
            to_status=to_value,
            note=note,
            metadata=metadata,
        )

    def _apply_state_change(self, repo: OrderRepository, order: Order, next_state: str, actor,
                            notes: Optional[str], warnings: List[str],
                            metadata: Optional[Dict[str, Any]] = None) -> Order:
        """Write the state/status pair, milestones and audit entries for a canonical transition."""
        now = timezone.now()
        from_state, from_status = order.state, order.status
        next_status = canonical_to_legacy(next_state)

        patch = {'state': next_state, 'status': next_status, 'updated_by_id': _actor_id(actor)}
        patch.update(self._milestones_for_state(order, next_state, now, notes))
        updated = repo.update(order.id, **patch)

        audit_metadata = dict(metadata or {})
        audit_metadata.update({
            'fromStatus': from_status,
            'toStatus': next_status,
            'routingTarget': patch.get('routing_target'),
        })
        if warnings:
            audit_metadata['warnings'] = list(warnings)

        self._record_transition(
            repo.organization_id, updated, actor,
            old_values={'state': from_state, 'status': from_status},
            new_values={'state': next_state, 'status': next_status, 'notes': notes},
            from_value=from_state,
            to_value=next_state,
            note=notes or f"State changed from {from_state} to {next_state}",
            description=f"Changed order state from {from_state} to {next_state}",
            metadata=audit_metadata,
        )
        logger.info(f"Order {updated.order_number} state {from_state} -> {next_state}")
        return updated

    # ------------------------------------------------------------- entry points

    def transition(self, organization_id, order_id, to_status: str, reason: Optional[str] = None,
                   actor=None) -> TransitionResult:
        """
        Move an order to a new legacy status.

        Args:
            organization_id: Caller's organization UUID
            order_id: Order UUID
            to_status: Requested legacy status
            reason: Optional reason, stored on the audit entry
            actor: User performing the transition

        Returns:
            TransitionResult with the refreshed order and any warnings
        """
        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                return TransitionResult.not_found()

            preferences = self.preferences_provider(organization_id)
            ctx = self._build_context(repo, order, preferences)
            validation = validate_transition(order.status, to_status, ctx, current_state=order.state)
            if not validation.ok:
                logger.info(f"Order {order.order_number} transition to {to_status} rejected: {validation.code}")
                return TransitionResult.from_validation(validation)

            warnings = list(validation.warnings)
            now = timezone.now()
            from_status, from_state = order.status, order.state
            next_state = legacy_to_canonical(to_status)

            patch = {'status': to_status, 'state': next_state, 'updated_by_id': _actor_id(actor)}

            if to_status == OrderStatus.IN_PRODUCTION:
                if from_status == OrderStatus.NEW:
                    deduction = self.inventory_deduction.deduct(organization_id, order.id, _actor_id(actor))
                    if deduction.is_warning:
                        logger.warning(f"Order {order.order_number} entered production with deduction warning: "
                                       f"{deduction.reason}")
                        warnings.append(deduction.warning_message)
                if order.started_production_at is None:
                    patch['started_production_at'] = now
            elif to_status == OrderStatus.READY_FOR_SHIPMENT:
                if order.production_completed_at is None:
                    patch['production_completed_at'] = now
                patch['routing_target'] = determine_routing_target(order.shipping_method)
            elif to_status == OrderStatus.COMPLETED:
                if order.closed_at is None:
                    patch['closed_at'] = now
            elif to_status == OrderStatus.CANCELED:
                if order.canceled_at is None:
                    patch['canceled_at'] = now
                patch['cancellation_reason'] = reason or ''

            updated = repo.update(order.id, **patch)

            metadata = {'fromState': from_state, 'toState': next_state}
            if 'routing_target' in patch:
                metadata['routingTarget'] = patch['routing_target']
            if warnings:
                metadata['warnings'] = warnings

            self._record_transition(
                organization_id, updated, actor,
                old_values={'status': from_status, 'state': from_state},
                new_values={'status': to_status, 'state': next_state, 'reason': reason},
                from_value=from_status,
                to_value=to_status,
                note=reason,
                description=f"Changed order status from {from_status} to {to_status}"
                            + (f": {reason}" if reason else ""),
                metadata=metadata,
            )

        logger.info(f"Order {updated.order_number} status {from_status} -> {to_status}")
        return TransitionResult(
            success=True,
            data=updated,
            message=f"Order status changed to {to_status}",
            warnings=warnings,
        )

    def transition_state(self, organization_id, order_id, next_state: str, actor=None,
                         notes: Optional[str] = None) -> TransitionResult:
        """
        Move an order to a new canonical state.

        The legacy status is derived from the new state.

        Returns:
            TransitionResult with the refreshed order and any warnings
        """
        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                return TransitionResult.not_found()

            preferences = self.preferences_provider(organization_id)
            ctx = self._build_context(repo, order, preferences)
            validation = validate_state_transition(order.state, next_state, ctx)
            if not validation.ok:
                logger.info(f"Order {order.order_number} state change to {next_state} rejected: {validation.code}")
                return TransitionResult.from_validation(validation)

            warnings = list(validation.warnings)
            updated = self._apply_state_change(repo, order, next_state, actor, notes, warnings)

        return TransitionResult(
            success=True,
            data=updated,
            message=f"Order transitioned to {next_state}",
            warnings=warnings,
        )

    def complete_production(self, organization_id, order_id, actor=None,
                            auto_mark_remaining_done: bool = False) -> TransitionResult:
        """
        Move an open order to production_complete.

        When the organization requires finished line items and some remain,
        the call is rejected with LINE_ITEMS_NOT_COMPLETE unless
        ``auto_mark_remaining_done`` is set, in which case the remaining items
        are marked done in the same transaction. When the organization does
        not require finished line items, auto-marking does nothing.

        Returns:
            TransitionResult with did_auto_mark and auto_marked_count
        """
        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                return TransitionResult.not_found()

            preferences = self.preferences_provider(organization_id)
            should_auto_mark = bool(
                auto_mark_remaining_done and preferences.require_all_line_items_done_to_complete
            )
            ctx = self._build_context(repo, order, preferences, auto_mark_remaining_done=should_auto_mark)
            validation = validate_state_transition(order.state, OrderState.PRODUCTION_COMPLETE, ctx)
            if not validation.ok:
                logger.info(f"Order {order.order_number} complete-production rejected: {validation.code}")
                return TransitionResult.from_validation(validation)

            warnings = list(validation.warnings)
            auto_marked_count = 0

            if should_auto_mark and ctx.incomplete_line_items_count > 0:
                remaining_ids = [
                    item.id for item in repo.list_line_items(order.id) if not item.is_finished
                ]
                auto_marked_count = repo.bulk_update_line_item_status(
                    order.id, remaining_ids, LineItemStatus.DONE
                )
                self.audit_logger.record_order(
                    organization_id,
                    order.id,
                    OrderAuditAction.BULK_LINE_ITEM_STATUS_UPDATE,
                    actor=actor,
                    to_status=LineItemStatus.DONE,
                    note=f"Auto-marked {auto_marked_count} remaining line item(s) done to complete production",
                    metadata={'lineItemIds': remaining_ids, 'count': auto_marked_count, 'autoMarked': True},
                )

            updated = self._apply_state_change(
                repo, order, OrderState.PRODUCTION_COMPLETE, actor, None, warnings,
                metadata={'autoMarkedCount': auto_marked_count},
            )

        return TransitionResult(
            success=True,
            data=updated,
            message='Order production completed',
            warnings=warnings,
            did_auto_mark=auto_marked_count > 0,
            auto_marked_count=auto_marked_count,
        )

    def update_line_item_statuses(self, organization_id, order_id, status: str, actor=None,
                                  line_item_ids: Optional[List[Any]] = None) -> TransitionResult:
        """
        Set the status of several line items of one order.

        Args:
            organization_id: Caller's organization UUID
            order_id: Order UUID
            status: New LineItemStatus value
            actor: User performing the change
            line_item_ids: Line items to update; all of the order's items when None

        Returns:
            TransitionResult with details['updatedCount']
        """
        if status not in LineItemStatus.values:
            return TransitionResult.rejected(
                'VALIDATION_ERROR', f"Invalid line item status: {status}", {'status': status}
            )

        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                return TransitionResult.not_found()

            preferences = self.preferences_provider(organization_id)
            guard = validate_order_edit(order.state, _is_elevated(actor), preferences)
            if not guard.ok:
                return TransitionResult.from_validation(guard)

            items = repo.list_line_items(order.id)
            if line_item_ids is not None:
                wanted = {str(i) for i in line_item_ids}
                items = [item for item in items if str(item.id) in wanted]
            target_ids = [item.id for item in items if item.status != status]

            updated_count = 0
            if target_ids:
                updated_count = repo.bulk_update_line_item_status(order.id, target_ids, status)
                self.audit_logger.record_order(
                    organization_id,
                    order.id,
                    OrderAuditAction.BULK_LINE_ITEM_STATUS_UPDATE,
                    actor=actor,
                    to_status=status,
                    note=f"Updated {updated_count} line item(s) to {status}",
                    metadata={'lineItemIds': target_ids, 'count': updated_count},
                )
                self.audit_logger.record_entity(
                    organization_id,
                    entity_type='order',
                    entity_id=order.id,
                    actor=actor,
                    action=AuditAction.UPDATE,
                    entity_name=order.order_number,
                    description=f"Set {updated_count} line item(s) to {status}",
                    new_values={'lineItemIds': target_ids, 'status': status},
                )
            order.refresh_from_db()

        logger.info(f"Order {order.order_number}: {updated_count} line item(s) set to {status}")
        return TransitionResult(
            success=True,
            data=order,
            message=f"Updated {updated_count} line item(s)",
            details={'updatedCount': updated_count},
        )

    def _clean_details_patch(self, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Raises:
            ValidationException: If the patch touches non-editable fields or bad values
        """
        not_editable = sorted(set(patch) - set(EDITABLE_ORDER_FIELDS))
        if not_editable:
            raise ValidationException(
                f"Field(s) not editable here: {', '.join(not_editable)}",
                {name: 'not editable' for name in not_editable},
            )
        if 'priority' in patch and patch['priority'] not in OrderPriority.values:
            raise ValidationException("Invalid priority", {'priority': patch['priority']})
        if 'shipping_method' in patch and patch['shipping_method'] not in ShippingMethod.values:
            raise ValidationException("Invalid shipping method", {'shipping_method': patch['shipping_method']})
        cleaned = dict(patch)
        if 'notes' in cleaned and cleaned['notes'] is None:
            cleaned['notes'] = ''
        return cleaned

    def update_order_details(self, organization_id, order_id, patch: Dict[str, Any],
                             actor=None) -> TransitionResult:
        """
        Edit an order's non-lifecycle fields.

        Closed and canceled orders are guarded by the organization's edit
        lock. Status and state are never touched here.

        Returns:
            TransitionResult with details['changedFields']
        """
        try:
            cleaned = self._clean_details_patch(patch or {})
        except ValidationException as e:
            return TransitionResult.rejected(e.code, e.message, e.details)

        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                return TransitionResult.not_found()

            preferences = self.preferences_provider(organization_id)
            guard = validate_order_edit(order.state, _is_elevated(actor), preferences)
            if not guard.ok:
                return TransitionResult.from_validation(guard)

            changes = {
                name: {'old': getattr(order, name), 'new': value}
                for name, value in cleaned.items()
                if getattr(order, name) != value
            }
            if not changes:
                return TransitionResult(success=True, data=order, message='No changes',
                                        details={'changedFields': []})

            update_patch = {name: change['new'] for name, change in changes.items()}
            update_patch['updated_by_id'] = _actor_id(actor)
            if 'shipping_method' in changes and order.routing_target:
                update_patch['routing_target'] = determine_routing_target(changes['shipping_method']['new'])
            updated = repo.update(order.id, **update_patch)

            if 'priority' in changes:
                self.audit_logger.record_order(
                    organization_id,
                    order.id,
                    OrderAuditAction.PRIORITY_CHANGE,
                    actor=actor,
                    from_status=changes['priority']['old'],
                    to_status=changes['priority']['new'],
                    note=f"Priority changed from {changes['priority']['old']} to {changes['priority']['new']}",
                )
            other_changes = {name: change for name, change in changes.items() if name != 'priority'}
            if other_changes:
                self.audit_logger.record_order(
                    organization_id,
                    order.id,
                    OrderAuditAction.ORDER_UPDATED,
                    actor=actor,
                    note=f"Updated {', '.join(sorted(other_changes))}",
                    metadata={'changes': other_changes},
                )
            self.audit_logger.record_entity(
                organization_id,
                entity_type='order',
                entity_id=order.id,
                actor=actor,
                action=AuditAction.UPDATE,
                entity_name=order.order_number,
                description=f"Updated order {order.order_number}",
                old_values={name: change['old'] for name, change in changes.items()},
                new_values={name: change['new'] for name, change in changes.items()},
            )

        logger.info(f"Order {updated.order_number} details updated: {sorted(changes)}")
        return TransitionResult(
            success=True,
            data=updated,
            message='Order updated',
            details={'changedFields': sorted(changes)},
        )

    def get_available_transitions(self, organization_id, order_id) -> TransitionResult:
        """Legacy statuses and canonical states the order may move to next."""
        order = OrderRepository(organization_id).get(order_id)
        if order is None:
            return TransitionResult.not_found()

        return TransitionResult(
            success=True,
            data=order,
            details={
                'status': order.status,
                'state': order.state,
                'allowedStatuses': get_allowed_next_statuses(order.status, order.state),
                'allowedStates': get_allowed_next_states(order.state),
                'isTerminal': is_terminal_state(order.state),
            },
        )

    def get_order_or_raise(self, organization_id, order_id) -> Order:
        """
        Raises:
            OrderNotFoundException: If the order is not in the organization
        """
        order = OrderRepository(organization_id).get(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order


def get_order_state_service() -> OrderStateService:
    """Factory for the default, fully wired service."""
    return OrderStateService(
        inventory_deduction=InventoryDeductionService(),
        audit_logger=AuditLogger(),
        preferences_provider=get_organization_preferences,
    )
