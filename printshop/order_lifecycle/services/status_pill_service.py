"""
Status Pill Service for the Order Lifecycle.

Manages organization-configurable display labels scoped to canonical states.
Pills never influence transition rules.
"""

import logging
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from organizations.preferences import get_organization_preferences
from ..exceptions import OrderLockedException, OrderNotFoundException, StatusPillException
from ..models import AuditAction, Order, OrderAuditAction, OrderState, OrderStatusPill
from ..repositories import OrderRepository
from .audit_logger import AuditLogger
from .transition_validator import validate_order_edit

logger = logging.getLogger(__name__)

NO_PILL = '(none)'

DEFAULT_PILLS = [
    # (state_scope, name, color, is_default, sort_order)
    (OrderState.OPEN, 'New', '#3b82f6', True, 0),
    (OrderState.OPEN, 'In Production', '#f97316', False, 1),
    (OrderState.OPEN, 'On Hold', '#eab308', False, 2),
    (OrderState.PRODUCTION_COMPLETE, 'Ready', '#8b5cf6', True, 0),
    (OrderState.SHIPPED, 'Shipped', '#0ea5e9', True, 0),
    (OrderState.CLOSED, 'Completed', '#22c55e', True, 0),
    (OrderState.CANCELED, 'Canceled', '#64748b', True, 0),
]

UPDATABLE_FIELDS = ('name', 'color', 'is_default', 'is_active', 'sort_order')


def _pill_values(pill: OrderStatusPill) -> Dict[str, Any]:
    return {
        'state_scope': pill.state_scope,
        'name': pill.name,
        'color': pill.color,
        'is_default': pill.is_default,
        'is_active': pill.is_active,
        'sort_order': pill.sort_order,
    }


class StatusPillService:
    """Service class for status pill operations."""

    def __init__(self, audit_logger: AuditLogger = None, preferences_provider=None):
        self.audit_logger = audit_logger or AuditLogger()
        self.preferences_provider = preferences_provider or get_organization_preferences

    def _pills(self, organization_id):
        return OrderStatusPill.objects.for_organization(organization_id)

    def _get_pill(self, organization_id, pill_id, lock: bool = False) -> OrderStatusPill:
        queryset = self._pills(organization_id)
        if lock:
            queryset = queryset.select_for_update()
        try:
            pill = queryset.filter(id=pill_id).first()
        except (ValueError, ValidationError):
            pill = None
        if pill is None:
            raise StatusPillException("Status pill not found", "STATUS_PILL_NOT_FOUND", {"pill_id": str(pill_id)})
        return pill

    def _clear_default(self, organization_id, state_scope, exclude_id=None) -> None:
        defaults = self._pills(organization_id).select_for_update().filter(
            state_scope=state_scope, is_default=True
        )
        if exclude_id is not None:
            defaults = defaults.exclude(id=exclude_id)
        for pill in defaults:
            pill.is_default = False
            pill.save(update_fields=['is_default', 'updated_at'])

    def _audit(self, organization_id, pill: OrderStatusPill, action: str, actor, description: str,
               old_values=None, new_values=None) -> None:
        self.audit_logger.record_entity(
            organization_id,
            entity_type='status_pill',
            entity_id=pill.id,
            actor=actor,
            action=action,
            entity_name=pill.name,
            description=description,
            old_values=old_values,
            new_values=new_values,
        )

    def list(self, organization_id, state_scope: Optional[str] = None,
             active_only: bool = True) -> List[OrderStatusPill]:
        pills = self._pills(organization_id)
        if state_scope:
            pills = pills.filter(state_scope=state_scope)
        if active_only:
            pills = pills.filter(is_active=True)
        return list(pills.order_by('sort_order', 'name'))

    def get_default(self, organization_id, state_scope: str) -> Optional[OrderStatusPill]:
        return self._pills(organization_id).filter(
            state_scope=state_scope, is_default=True, is_active=True
        ).first()

    def create(self, organization_id, data: Dict[str, Any], actor=None) -> OrderStatusPill:
        """
        Create a status pill.

        Args:
            organization_id: Owning organization UUID
            data: state_scope, name and optional color, is_default, is_active, sort_order
            actor: User creating the pill

        Returns:
            Created OrderStatusPill

        Raises:
            StatusPillException: If the scope or name is invalid
        """
        state_scope = data.get('state_scope')
        name = (data.get('name') or '').strip()
        if state_scope not in OrderState.values:
            raise StatusPillException(f"Invalid state scope: {state_scope}", details={'state_scope': state_scope})
        if not name:
            raise StatusPillException("Status pill name is required", details={'name': 'required'})

        with transaction.atomic():
            if self._pills(organization_id).filter(state_scope=state_scope, name=name, is_active=True).exists():
                raise StatusPillException(
                    f'Status pill "{name}" already exists for state "{state_scope}"',
                    details={'name': name},
                )
            is_default = bool(data.get('is_default', False))
            if is_default:
                self._clear_default(organization_id, state_scope)

            pill = OrderStatusPill.objects.create(
                organization_id=organization_id,
                state_scope=state_scope,
                name=name,
                color=data.get('color') or '',
                is_default=is_default,
                is_active=data.get('is_active', True),
                sort_order=data.get('sort_order', 0),
            )
            self._audit(organization_id, pill, AuditAction.CREATE, actor,
                        f"Created status pill {name} for {state_scope}", new_values=_pill_values(pill))

        logger.info(f"Status pill '{name}' created for {state_scope} in organization {organization_id}")
        return pill

    def update(self, organization_id, pill_id, data: Dict[str, Any], actor=None) -> OrderStatusPill:
        """
        Update a status pill's label, color, ordering or default flag.

        Raises:
            StatusPillException: If the pill is missing or the change would leave its scope without a default
        """
        changes = {name: value for name, value in data.items() if name in UPDATABLE_FIELDS}

        with transaction.atomic():
            pill = self._get_pill(organization_id, pill_id, lock=True)
            old_values = _pill_values(pill)

            if pill.is_default and (changes.get('is_default') is False or changes.get('is_active') is False):
                raise StatusPillException(
                    "Cannot unset or deactivate the default status pill. Promote another pill to default first."
                )
            if 'name' in changes:
                changes['name'] = (changes['name'] or '').strip()
                if not changes['name']:
                    raise StatusPillException("Status pill name is required", details={'name': 'required'})
            if changes.get('is_default'):
                self._clear_default(organization_id, pill.state_scope, exclude_id=pill.id)
                changes['is_active'] = True

            for name, value in changes.items():
                setattr(pill, name, value)
            pill.save()

            self._audit(organization_id, pill, AuditAction.UPDATE, actor,
                        f"Updated status pill {pill.name}", old_values=old_values, new_values=_pill_values(pill))

        logger.info(f"Status pill {pill.id} updated: {sorted(changes)}")
        return pill

    def delete(self, organization_id, pill_id, actor=None) -> OrderStatusPill:
        """
        Deactivate a status pill.

        Raises:
            StatusPillException: If the pill is missing, is the default, or is on any order
        """
        with transaction.atomic():
            pill = self._get_pill(organization_id, pill_id, lock=True)

            if pill.is_default:
                raise StatusPillException(
                    "Cannot delete the default status pill. Promote another pill to default first.",
                    "STATUS_PILL_DEFAULT_DELETE",
                )

            in_use = OrderRepository(organization_id).count_orders_with_pill(pill.name)
            if in_use:
                raise StatusPillException(
                    f"Cannot delete status pill: {in_use} order(s) are currently using it.",
                    "STATUS_PILL_IN_USE",
                    {'orderCount': in_use},
                )

            pill.is_active = False
            pill.save(update_fields=['is_active', 'updated_at'])
            self._audit(organization_id, pill, AuditAction.DELETE, actor,
                        f"Deactivated status pill {pill.name}", old_values={'is_active': True},
                        new_values={'is_active': False})

        logger.info(f"Status pill {pill.id} deactivated")
        return pill

    def set_default(self, organization_id, pill_id, actor=None) -> OrderStatusPill:
        """
        Make a pill the default of its state scope.

        Raises:
            StatusPillException: If the pill is missing or inactive
        """
        with transaction.atomic():
            pill = self._get_pill(organization_id, pill_id, lock=True)
            if not pill.is_active:
                raise StatusPillException("Inactive status pills cannot be the default")
            if pill.is_default:
                return pill

            self._clear_default(organization_id, pill.state_scope, exclude_id=pill.id)
            pill.is_default = True
            pill.save(update_fields=['is_default', 'updated_at'])
            self._audit(organization_id, pill, AuditAction.UPDATE, actor,
                        f"Made {pill.name} the default pill for {pill.state_scope}",
                        old_values={'is_default': False}, new_values={'is_default': True})

        logger.info(f"Status pill {pill.id} is now default for {pill.state_scope}")
        return pill

    def ensure_default(self, organization_id, state_scope: str) -> Optional[OrderStatusPill]:
        """Promote the first active pill when a scope has pills but no default."""
        with transaction.atomic():
            pills = list(
                self._pills(organization_id).select_for_update()
                .filter(state_scope=state_scope, is_active=True)
                .order_by('sort_order', 'name')
            )
            if not pills:
                return None
            for pill in pills:
                if pill.is_default:
                    return pill

            first = pills[0]
            first.is_default = True
            first.save(update_fields=['is_default', 'updated_at'])
            self._audit(organization_id, first, AuditAction.UPDATE, None,
                        f"Promoted {first.name} to default pill for {state_scope}",
                        old_values={'is_default': False}, new_values={'is_default': True})
        return first

    def seed_defaults(self, organization_id) -> List[OrderStatusPill]:
        """
        Seed the standard pills for an organization that has none.

        Returns:
            The created pills (empty when the organization already has pills)
        """
        with transaction.atomic():
            if self._pills(organization_id).exists():
                logger.info(f"Pills already exist for organization {organization_id}, skipping seed")
                return []

            created = OrderStatusPill.objects.bulk_create([
                OrderStatusPill(
                    organization_id=organization_id,
                    state_scope=scope,
                    name=name,
                    color=color,
                    is_default=is_default,
                    sort_order=sort_order,
                )
                for scope, name, color, is_default, sort_order in DEFAULT_PILLS
            ])

        logger.info(f"Seeded {len(created)} default pills for organization {organization_id}")
        return created

    def assign(self, organization_id, order_id, value: Optional[str], actor=None) -> Order:
        """
        Set or clear the status pill shown on an order.

        Args:
            organization_id: Caller's organization UUID
            order_id: Order UUID
            value: Pill name, or None/empty to clear
            actor: User making the change

        Returns:
            The refreshed order

        Raises:
            OrderNotFoundException: If the order is not in the organization
            OrderLockedException: If the order is closed or canceled and the actor may not edit it
            StatusPillException: If the value is not an active pill of the order's state
        """
        value = (value or '').strip() or None

        with transaction.atomic():
            repo = OrderRepository(organization_id)
            order = repo.get(order_id, lock=True)
            if order is None:
                raise OrderNotFoundException(order_id)

            edit_check = validate_order_edit(
                order.state,
                bool(getattr(actor, 'is_elevated', False)),
                self.preferences_provider(organization_id),
            )
            if not edit_check.ok:
                raise OrderLockedException(edit_check.message, edit_check.code)

            current_state = order.state
            previous = order.status_pill_value

            if value is not None:
                exists = self._pills(organization_id).filter(
                    state_scope=current_state, name=value, is_active=True
                ).exists()
                if not exists:
                    raise StatusPillException(
                        f'Status pill "{value}" does not exist for state "{current_state}" in this organization',
                        details={'value': value, 'state': current_state},
                    )

            updated = repo.update(order.id, status_pill_value=value)

            self.audit_logger.record_order(
                organization_id,
                order.id,
                OrderAuditAction.STATUS_PILL_CHANGED,
                actor=actor,
                from_status=previous or NO_PILL,
                to_status=value or NO_PILL,
                note=f'Status pill changed to "{value}"' if value else 'Status pill cleared',
                metadata={'currentState': current_state},
            )
            self.audit_logger.record_entity(
                organization_id,
                entity_type='order',
                entity_id=order.id,
                actor=actor,
                action=AuditAction.UPDATE,
                entity_name=order.order_number,
                description=f"Status pill set to {value}" if value else "Status pill cleared",
                old_values={'status_pill_value': previous},
                new_values={'status_pill_value': value},
            )

        logger.info(f"Order {updated.order_number} pill {previous or NO_PILL} -> {value or NO_PILL}")
        return updated
