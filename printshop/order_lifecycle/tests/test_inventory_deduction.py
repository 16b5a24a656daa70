"""
Tests for material deduction when orders enter production.
"""

from decimal import Decimal

from django.test import TestCase

from inventory.models import InventoryAdjustment, Material, OrderMaterialUsage
from ..adapters.inventory_adapter import InventoryAdapterInterface, MaterialInventoryAdapter
from ..models import OrderStatus
from ..services import InventoryDeductionService, OrderStateService
from ..services.inventory_deduction import DEDUCTION_FAILED_WARNING
from .factories import FailingInventoryAdapter, add_line_items, make_order, make_organization, make_user


class PartialWriteAdapter(InventoryAdapterInterface):
    """Writes an adjustment, then fails."""

    def __init__(self, material):
        self.material = material

    def deduct_for_order(self, organization_id, order_id, actor_id=None):
        InventoryAdjustment.objects.create(
            organization_id=organization_id,
            material=self.material,
            type='job_usage',
            quantity_change=Decimal('-1'),
        )
        raise RuntimeError("stock ledger offline")


class MaterialInventoryAdapterTest(TestCase):

    def setUp(self):
        self.org = make_organization()
        self.user = make_user(self.org)
        self.sheets = Material.objects.create(
            organization=self.org, name='Coroplast 4mm', sku='CORO-4', type='sheet',
            unit_of_measure='sheet', stock_quantity=Decimal('100'),
        )
        self.vinyl = Material.objects.create(
            organization=self.org, name='Banner Vinyl', sku='VINYL-13', type='roll',
            unit_of_measure='sqft', stock_quantity=Decimal('500'),
        )
        self.order = make_order(self.org)

    def test_quantity_needed(self):
        sheet_item, sheet_fallback = (
            add_line_items(self.order, 'queued', total_sheets=3)[0],
            add_line_items(self.order, 'queued', quantity=5)[0],
        )
        roll_item = add_line_items(self.order, 'queued', sqft=Decimal('12.50'))[0]

        self.assertEqual(MaterialInventoryAdapter.quantity_needed(sheet_item, self.sheets), Decimal('3'))
        self.assertEqual(MaterialInventoryAdapter.quantity_needed(sheet_fallback, self.sheets), Decimal('5'))
        self.assertEqual(MaterialInventoryAdapter.quantity_needed(roll_item, self.vinyl), Decimal('12.50'))

    def test_deducts_each_inventory_line_item(self):
        add_line_items(self.order, 'queued', material=self.sheets, requires_inventory=True, total_sheets=3)
        add_line_items(self.order, 'queued', material=self.vinyl, requires_inventory=True, sqft=Decimal('12.50'))
        add_line_items(self.order, 'queued', material=self.vinyl, requires_inventory=False, sqft=Decimal('40'))

        deducted = MaterialInventoryAdapter().deduct_for_order(self.org.id, self.order.id, self.user.id)

        self.assertEqual(deducted, 2)
        self.sheets.refresh_from_db()
        self.vinyl.refresh_from_db()
        self.assertEqual(self.sheets.stock_quantity, Decimal('97'))
        self.assertEqual(self.vinyl.stock_quantity, Decimal('487.50'))
        self.assertEqual(OrderMaterialUsage.objects.filter(order=self.order).count(), 2)
        adjustment = InventoryAdjustment.objects.get(material=self.sheets)
        self.assertEqual(adjustment.type, 'job_usage')
        self.assertEqual(adjustment.quantity_change, Decimal('-3'))
        self.assertEqual(adjustment.order, self.order)
        self.assertEqual(adjustment.user, self.user)

    def test_repeat_deduction_skips_used_line_items(self):
        add_line_items(self.order, 'queued', material=self.sheets, requires_inventory=True, total_sheets=3)
        adapter = MaterialInventoryAdapter()

        self.assertEqual(adapter.deduct_for_order(self.org.id, self.order.id), 1)
        self.assertEqual(adapter.deduct_for_order(self.org.id, self.order.id), 0)

        self.sheets.refresh_from_db()
        self.assertEqual(self.sheets.stock_quantity, Decimal('97'))

    def test_stock_may_go_negative(self):
        add_line_items(self.order, 'queued', material=self.sheets, requires_inventory=True, total_sheets=150)

        MaterialInventoryAdapter().deduct_for_order(self.org.id, self.order.id)

        self.sheets.refresh_from_db()
        self.assertEqual(self.sheets.stock_quantity, Decimal('-50'))


class InventoryDeductionServiceTest(TestCase):

    def setUp(self):
        self.org = make_organization()
        self.order = make_order(self.org)

    def test_failure_becomes_warning(self):
        result = InventoryDeductionService(FailingInventoryAdapter()).deduct(self.org.id, self.order.id)

        self.assertTrue(result.is_warning)
        self.assertEqual(result.reason, 'stock service unavailable')
        self.assertEqual(result.warning_message, DEDUCTION_FAILED_WARNING)

    def test_failed_deduction_rolls_back_its_writes(self):
        material = Material.objects.create(organization=self.org, name='Foam Board', sku='FOAM-5')

        result = InventoryDeductionService(PartialWriteAdapter(material)).deduct(self.org.id, self.order.id)

        self.assertTrue(result.is_warning)
        self.assertFalse(InventoryAdjustment.objects.filter(material=material).exists())

    def test_success_reports_count(self):
        material = Material.objects.create(organization=self.org, name='Foam Board', sku='FOAM-5')
        add_line_items(self.order, 'queued', material=material, requires_inventory=True, quantity=4)

        result = InventoryDeductionService().deduct(self.org.id, self.order.id)

        self.assertFalse(result.is_warning)
        self.assertEqual(result.deducted_count, 1)
        self.assertIsNone(result.warning_message)

    def test_start_production_deducts_stock(self):
        material = Material.objects.create(
            organization=self.org, name='Foam Board', sku='FOAM-5', stock_quantity=Decimal('10')
        )
        add_line_items(self.order, 'queued', material=material, requires_inventory=True, quantity=4)

        result = OrderStateService().transition(self.org.id, self.order.id, OrderStatus.IN_PRODUCTION)

        self.assertTrue(result.success)
        self.assertNotIn(DEDUCTION_FAILED_WARNING, result.warnings)
        material.refresh_from_db()
        self.assertEqual(material.stock_quantity, Decimal('6'))
