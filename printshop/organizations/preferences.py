"""
Organization order preferences.

Preferences are resolved once per request and passed explicitly to the
transition validator; nothing reads them from module state.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction

from .models import Organization

logger = logging.getLogger(__name__)


# Keys as stored by the settings UI -> dataclass field names.
_PREFERENCE_KEYS = {
    'requireDueDateForProduction': 'require_due_date_for_production',
    'requireBillingAddressForProduction': 'require_billing_address_for_production',
    'requireShippingAddressForProduction': 'require_shipping_address_for_production',
    'requireAllLineItemsDoneToComplete': 'require_all_line_items_done_to_complete',
    'allowCompletedOrderEdits': 'allow_completed_order_edits',
}

# Older organizations saved this spelling.
_LEGACY_ALIASES = {
    'requireLineItemsDoneToComplete': 'require_all_line_items_done_to_complete',
}


@dataclass(frozen=True)
class OrderPreferences:
    """Order workflow rules configured per organization."""

    require_due_date_for_production: bool = False
    require_billing_address_for_production: bool = False
    require_shipping_address_for_production: bool = False
    require_all_line_items_done_to_complete: bool = True
    allow_completed_order_edits: bool = False

    @classmethod
    def defaults(cls) -> 'OrderPreferences':
        return cls(
            require_all_line_items_done_to_complete=getattr(
                settings, 'ORDERS_DEFAULT_REQUIRE_ALL_LINE_ITEMS_DONE', True
            ),
        )

    @classmethod
    def from_settings(cls, org_settings: Optional[Dict[str, Any]]) -> 'OrderPreferences':
        """
        Build preferences from an organization's ``settings`` JSON.

        Args:
            org_settings: Raw ``Organization.settings`` value (may be None)

        Returns:
            OrderPreferences with defaults for any missing key
        """
        orders = ((org_settings or {}).get('preferences') or {}).get('orders') or {}
        values = {}

        for key, field_name in _LEGACY_ALIASES.items():
            if key in orders and orders[key] is not None:
                values[field_name] = bool(orders[key])

        for key, field_name in _PREFERENCE_KEYS.items():
            if key in orders and orders[key] is not None:
                values[field_name] = bool(orders[key])
            elif field_name in orders and orders[field_name] is not None:
                values[field_name] = bool(orders[field_name])

        return replace(cls.defaults(), **values)

    def to_settings(self) -> Dict[str, bool]:
        """Serialize back to the camelCase shape stored on the organization."""
        by_field = {field_name: key for key, field_name in _PREFERENCE_KEYS.items()}
        return {by_field[f.name]: getattr(self, f.name) for f in fields(self)}


def get_organization_preferences(organization_id) -> OrderPreferences:
    """
    Resolve order preferences for an organization.

    Unknown organizations resolve to defaults; tenant existence is checked by
    the caller's order lookup, not here.
    """
    org_settings = (
        Organization.objects
        .filter(id=organization_id)
        .values_list('settings', flat=True)
        .first()
    )
    if org_settings is None:
        logger.debug(f"No settings stored for organization {organization_id}, using defaults")
    return OrderPreferences.from_settings(org_settings)


def update_order_preferences(organization_id, **changes) -> OrderPreferences:
    """
    Merge preference changes into the organization's stored settings.

    Args:
        organization_id: Organization UUID
        **changes: OrderPreferences field names and new values

    Returns:
        The resulting OrderPreferences

    Raises:
        Organization.DoesNotExist: If the organization does not exist
        TypeError: If an unknown preference name is passed
    """
    with transaction.atomic():
        organization = Organization.objects.select_for_update().get(id=organization_id)
        current = OrderPreferences.from_settings(organization.settings)
        updated = replace(current, **changes)

        org_settings = dict(organization.settings or {})
        preferences = dict(org_settings.get('preferences') or {})
        preferences['orders'] = updated.to_settings()
        org_settings['preferences'] = preferences
        organization.settings = org_settings
        organization.save(update_fields=['settings', 'updated_at'])

    logger.info(f"Order preferences updated for organization {organization_id}: {sorted(changes)}")
    return updated
