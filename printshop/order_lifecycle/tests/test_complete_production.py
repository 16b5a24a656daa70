"""
Tests for completing production with and without auto-marking line items.
"""

from django.test import TestCase

from organizations.preferences import OrderPreferences
from ..models import LineItemStatus, OrderAuditAction, OrderAuditLog, OrderLineItem, OrderState, OrderStatus
from ..services import InventoryDeductionService, OrderStateService
from .factories import RecordingInventoryAdapter, add_line_items, make_order, make_organization, make_user


class CompleteProductionTest(TestCase):

    def setUp(self):
        self.org = make_organization()
        self.user = make_user(self.org)
        self.service = OrderStateService(inventory_deduction=InventoryDeductionService(RecordingInventoryAdapter()))
        self.order = make_order(self.org, status=OrderStatus.IN_PRODUCTION)

    def test_remaining_items_reject_without_override(self):
        add_line_items(self.order, LineItemStatus.DONE, LineItemStatus.QUEUED, LineItemStatus.PRINTING)

        result = self.service.complete_production(self.org.id, self.order.id, actor=self.user)

        self.assertFalse(result.success)
        self.assertEqual(result.code, 'LINE_ITEMS_NOT_COMPLETE')
        self.assertEqual(result.details, {'remainingCount': 2, 'canOverride': True})
        self.order.refresh_from_db()
        self.assertEqual(self.order.state, OrderState.OPEN)
        self.assertEqual(OrderLineItem.objects.filter(order=self.order, status=LineItemStatus.DONE).count(), 1)
        self.assertFalse(OrderAuditLog.objects.filter(order=self.order).exists())

    def test_auto_mark_finishes_remaining_items(self):
        add_line_items(self.order, LineItemStatus.DONE, LineItemStatus.QUEUED, LineItemStatus.PRINTING)

        result = self.service.complete_production(
            self.org.id, self.order.id, actor=self.user, auto_mark_remaining_done=True
        )

        self.assertTrue(result.success)
        self.assertEqual(result.message, 'Order production completed')
        self.assertTrue(result.did_auto_mark)
        self.assertEqual(result.auto_marked_count, 2)
        self.assertEqual(result.data.state, OrderState.PRODUCTION_COMPLETE)
        self.assertEqual(result.data.status, OrderStatus.READY_FOR_SHIPMENT)
        self.assertFalse(OrderLineItem.objects.filter(order=self.order).unfinished().exists())

        actions = list(OrderAuditLog.objects.filter(order=self.order).values_list('action_type', flat=True))
        self.assertEqual(
            actions, [OrderAuditAction.BULK_LINE_ITEM_STATUS_UPDATE, OrderAuditAction.STATUS_TRANSITION]
        )
        bulk_entry = OrderAuditLog.objects.get(
            order=self.order, action_type=OrderAuditAction.BULK_LINE_ITEM_STATUS_UPDATE
        )
        self.assertEqual(bulk_entry.metadata['count'], 2)
        self.assertTrue(bulk_entry.metadata['autoMarked'])

    def test_canceled_items_count_as_finished(self):
        add_line_items(self.order, LineItemStatus.DONE, LineItemStatus.CANCELED)

        result = self.service.complete_production(self.org.id, self.order.id, auto_mark_remaining_done=True)

        self.assertTrue(result.success)
        self.assertFalse(result.did_auto_mark)
        self.assertEqual(result.auto_marked_count, 0)
        self.assertFalse(OrderAuditLog.objects.filter(
            order=self.order, action_type=OrderAuditAction.BULK_LINE_ITEM_STATUS_UPDATE
        ).exists())

    def test_not_required_completes_without_marking(self):
        service = OrderStateService(
            inventory_deduction=InventoryDeductionService(RecordingInventoryAdapter()),
            preferences_provider=lambda organization_id: OrderPreferences(
                require_all_line_items_done_to_complete=False
            ),
        )
        add_line_items(self.order, LineItemStatus.QUEUED, LineItemStatus.PRINTING)

        result = service.complete_production(self.org.id, self.order.id, auto_mark_remaining_done=True)

        self.assertTrue(result.success)
        self.assertFalse(result.did_auto_mark)
        self.assertEqual(result.auto_marked_count, 0)
        self.assertEqual(OrderLineItem.objects.filter(order=self.order).unfinished().count(), 2)

    def test_sets_milestone_and_routing(self):
        pickup = make_order(self.org, status=OrderStatus.IN_PRODUCTION, shipping_method='pickup')
        add_line_items(pickup, LineItemStatus.DONE)

        result = self.service.complete_production(self.org.id, pickup.id)

        self.assertIsNotNone(result.data.production_completed_at)
        self.assertEqual(result.data.routing_target, 'invoicing')

    def test_only_open_orders(self):
        shipped = make_order(self.org, status=OrderStatus.READY_FOR_SHIPMENT, state=OrderState.SHIPPED)

        result = self.service.complete_production(self.org.id, shipped.id)

        self.assertEqual(result.code, 'INVALID_TRANSITION')
