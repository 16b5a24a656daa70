"""
Audit logger for the order lifecycle.

Two record paths share one rule: the write must happen inside the database
transaction of the mutation it describes.
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction

from ..exceptions import AuditWriteOutsideTransaction
from ..models import AuditAction, AuditLog, OrderAuditLog
from ..models.audit import make_json_safe

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_NAME = 'System'


def actor_display_name(actor) -> str:
    if actor is None:
        return SYSTEM_ACTOR_NAME
    return getattr(actor, 'display_name', None) or str(actor)


def _actor_or_none(actor):
    # Only persisted users can be referenced by the FK.
    if actor is None or getattr(actor, 'pk', None) is None:
        return None
    return actor


class AuditLogger:
    """
    Append-only writer for order and entity audit entries. Exposes no update
    or delete operation.
    """

    def _require_transaction(self, what: str) -> None:
        if not transaction.get_connection().in_atomic_block:
            raise AuditWriteOutsideTransaction(
                f"{what} audit entries must be written inside the mutation's transaction"
            )

    def record_order(self, organization_id, order_id, action_type: str, actor=None,
                     from_status: Optional[str] = None, to_status: Optional[str] = None,
                     note: Optional[str] = None,
                     metadata: Optional[Dict[str, Any]] = None) -> OrderAuditLog:
        """
        Write an order operational audit entry.

        Args:
            organization_id: Owning organization UUID
            order_id: Order UUID
            action_type: One of OrderAuditAction
            actor: User performing the action (None for system actions)
            from_status: Previous status, state or pill value
            to_status: New status, state or pill value
            note: Free-text note or reason
            metadata: Extra structured context

        Returns:
            Created OrderAuditLog

        Raises:
            AuditWriteOutsideTransaction: If no atomic block is active
        """
        self._require_transaction('Order')

        entry = OrderAuditLog.objects.create(
            organization_id=organization_id,
            order_id=order_id,
            actor=_actor_or_none(actor),
            actor_user_name=actor_display_name(actor),
            action_type=action_type,
            from_status=from_status,
            to_status=to_status,
            note=note,
            metadata=make_json_safe(metadata) if metadata is not None else None,
        )
        logger.debug(f"Order audit {action_type} recorded for order {order_id}")
        return entry

    def record_entity(self, organization_id, entity_type: str, entity_id, actor=None,
                      action: str = AuditAction.UPDATE, entity_name: str = "",
                      description: str = "", old_values: Optional[Dict[str, Any]] = None,
                      new_values: Optional[Dict[str, Any]] = None) -> AuditLog:
        """
        Write a generic entity audit entry.

        Raises:
            AuditWriteOutsideTransaction: If no atomic block is active
        """
        self._require_transaction('Entity')

        entry = AuditLog.objects.create(
            organization_id=organization_id,
            user=_actor_or_none(actor),
            user_name=actor_display_name(actor),
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            entity_name=entity_name or "",
            description=description or "",
            old_values=make_json_safe(old_values or {}),
            new_values=make_json_safe(new_values or {}),
        )
        logger.debug(f"{action} audit recorded for {entity_type} {entity_id}")
        return entry

    def list_order_entries(self, organization_id, order_id, action_type: Optional[str] = None):
        """Order audit entries, oldest first, scoped to the organization."""
        entries = (
            OrderAuditLog.objects.for_organization(organization_id)
            .filter(order_id=order_id)
            .select_related('actor')
        )
        if action_type:
            entries = entries.filter(action_type=action_type)
        return entries.order_by('created_at')
