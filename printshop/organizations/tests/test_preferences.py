"""
Tests for organization order preferences.
"""

import uuid

from django.test import SimpleTestCase, TestCase, override_settings

from organizations.models import Organization
from organizations.preferences import OrderPreferences, get_organization_preferences, update_order_preferences


class OrderPreferencesParsingTest(SimpleTestCase):

    def test_defaults(self):
        prefs = OrderPreferences.from_settings(None)

        self.assertFalse(prefs.require_due_date_for_production)
        self.assertFalse(prefs.require_billing_address_for_production)
        self.assertFalse(prefs.require_shipping_address_for_production)
        self.assertTrue(prefs.require_all_line_items_done_to_complete)
        self.assertFalse(prefs.allow_completed_order_edits)

    @override_settings(ORDERS_DEFAULT_REQUIRE_ALL_LINE_ITEMS_DONE=False)
    def test_default_from_django_settings(self):
        self.assertFalse(OrderPreferences.from_settings({}).require_all_line_items_done_to_complete)

    def test_camel_case_keys(self):
        prefs = OrderPreferences.from_settings({'preferences': {'orders': {
            'requireDueDateForProduction': True,
            'allowCompletedOrderEdits': True,
        }}})

        self.assertTrue(prefs.require_due_date_for_production)
        self.assertTrue(prefs.allow_completed_order_edits)

    def test_legacy_alias(self):
        prefs = OrderPreferences.from_settings({'preferences': {'orders': {
            'requireLineItemsDoneToComplete': False,
        }}})
        self.assertFalse(prefs.require_all_line_items_done_to_complete)

        both = OrderPreferences.from_settings({'preferences': {'orders': {
            'requireLineItemsDoneToComplete': False,
            'requireAllLineItemsDoneToComplete': True,
        }}})
        self.assertTrue(both.require_all_line_items_done_to_complete)

    def test_round_trip_shape(self):
        stored = OrderPreferences(require_shipping_address_for_production=True).to_settings()

        self.assertEqual(stored['requireShippingAddressForProduction'], True)
        self.assertEqual(set(stored), {
            'requireDueDateForProduction', 'requireBillingAddressForProduction',
            'requireShippingAddressForProduction', 'requireAllLineItemsDoneToComplete',
            'allowCompletedOrderEdits',
        })


class OrganizationPreferencesTest(TestCase):

    def setUp(self):
        self.org = Organization.objects.create(
            name='Acme Print',
            slug='acme-print',
            settings={'theme': 'dark', 'preferences': {'orders': {'requireDueDateForProduction': True}}},
        )

    def test_resolve_for_organization(self):
        self.assertTrue(get_organization_preferences(self.org.id).require_due_date_for_production)

    def test_unknown_organization_uses_defaults(self):
        self.assertEqual(get_organization_preferences(uuid.uuid4()), OrderPreferences.defaults())

    def test_update_merges_into_settings(self):
        prefs = update_order_preferences(self.org.id, allow_completed_order_edits=True)

        self.assertTrue(prefs.allow_completed_order_edits)
        self.assertTrue(prefs.require_due_date_for_production)
        self.org.refresh_from_db()
        self.assertEqual(self.org.settings['theme'], 'dark')
        self.assertTrue(self.org.settings['preferences']['orders']['allowCompletedOrderEdits'])
        self.assertEqual(get_organization_preferences(self.org.id), prefs)

    def test_update_rejects_unknown_preference(self):
        with self.assertRaises(TypeError):
            update_order_preferences(self.org.id, allow_everything=True)
