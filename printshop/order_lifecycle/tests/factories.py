"""
Shared test data builders for the Order Lifecycle tests.
"""

import uuid
from datetime import date

from django.contrib.auth import get_user_model

from organizations.models import Organization
from ..adapters.inventory_adapter import InventoryAdapterInterface
from ..models import Order, OrderLineItem, LineItemStatus, OrderStatus, OrderState


def make_organization(name='Acme Print', order_preferences=None):
    org_settings = {}
    if order_preferences is not None:
        org_settings = {'preferences': {'orders': order_preferences}}
    return Organization.objects.create(
        name=name,
        slug=f"{name.lower().replace(' ', '-')}-{uuid.uuid4().hex[:8]}",
        settings=org_settings,
    )


def make_user(organization, role='employee', username=None):
    username = username or f"user-{uuid.uuid4().hex[:8]}"
    return get_user_model().objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password='testpass123',
        first_name='Test',
        last_name=role.title(),
        organization=organization,
        role=role,
    )


def make_order(organization, status=OrderStatus.NEW, state=OrderState.OPEN, **fields):
    defaults = {
        'order_number': f"ORD-{uuid.uuid4().hex[:6].upper()}",
        'customer_name': 'Jane Customer',
        'due_date': date(2030, 1, 15),
        'bill_to_name': 'Jane Customer',
        'bill_to_address1': '1 Main St',
        'ship_to_name': 'Jane Customer',
        'ship_to_address1': '1 Main St',
    }
    defaults.update(fields)
    return Order.objects.create(organization=organization, status=status, state=state, **defaults)


def add_line_items(order, *statuses, **fields):
    """Create one line item per status given (default: a single queued item)."""
    statuses = statuses or (LineItemStatus.QUEUED,)
    return [
        OrderLineItem.objects.create(
            organization=order.organization,
            order=order,
            description=fields.get('description', f"Banner {index + 1}"),
            quantity=fields.get('quantity', 1),
            status=line_status,
            sort_order=index,
            material=fields.get('material'),
            requires_inventory=fields.get('requires_inventory', False),
            total_sheets=fields.get('total_sheets'),
            sqft=fields.get('sqft', 0),
        )
        for index, line_status in enumerate(statuses)
    ]


class FailingInventoryAdapter(InventoryAdapterInterface):
    """Inventory adapter that always raises."""

    def __init__(self, error=None):
        self.error = error or RuntimeError("stock service unavailable")
        self.calls = 0

    def deduct_for_order(self, organization_id, order_id, actor_id=None):
        self.calls += 1
        raise self.error


class RecordingInventoryAdapter(InventoryAdapterInterface):
    """Inventory adapter that records calls and deducts nothing."""

    def __init__(self):
        self.calls = []

    def deduct_for_order(self, organization_id, order_id, actor_id=None):
        self.calls.append((organization_id, order_id, actor_id))
        return 0
