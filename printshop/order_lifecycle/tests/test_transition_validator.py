"""
Tests for the pure transition rules.
"""

from itertools import product

from django.test import SimpleTestCase

from organizations.preferences import OrderPreferences
from ..models import OrderState, OrderStatus
from ..services.transition_validator import (
    ACTIVE_JOBS_WARNING, ALLOWED_STATE_TRANSITIONS, ALLOWED_STATUS_TRANSITIONS,
    FULFILLMENT_NOT_SHIPPED_WARNING, NO_ATTACHMENTS_WARNING, NOT_SHIPPED_WARNING,
    TransitionContext, canonical_to_legacy, determine_routing_target, get_allowed_next_states,
    get_allowed_next_statuses, is_terminal_state, is_terminal_status, legacy_to_canonical,
    validate_order_edit, validate_state_transition, validate_transition,
)


def ready_context(**overrides):
    values = dict(
        line_items_count=2,
        incomplete_line_items_count=0,
        attachments_count=1,
        jobs_count=0,
        fulfillment_status='pending',
        has_shipped_at=False,
        has_due_date=True,
        has_billing_address=True,
        has_shipping_address=True,
        shipping_method='ship',
        preferences=OrderPreferences(),
    )
    values.update(overrides)
    return TransitionContext(**values)


class LegacyTransitionTest(SimpleTestCase):

    def test_graph_edges_are_accepted(self):
        ctx = ready_context()
        for current, targets in ALLOWED_STATUS_TRANSITIONS.items():
            for target in targets:
                if (current, target) == (OrderStatus.READY_FOR_SHIPMENT, OrderStatus.ON_HOLD):
                    continue
                with self.subTest(current=current, target=target):
                    self.assertTrue(validate_transition(current, target, ctx).ok)

    def test_non_edges_are_invalid(self):
        ctx = ready_context()
        non_terminal = [s for s in OrderStatus.values if not is_terminal_status(s)]
        for current, target in product(non_terminal, OrderStatus.values):
            if current == target or target in ALLOWED_STATUS_TRANSITIONS[current]:
                continue
            with self.subTest(current=current, target=target):
                result = validate_transition(current, target, ctx)
                self.assertFalse(result.ok)
                self.assertEqual(result.code, 'INVALID_TRANSITION')
                self.assertEqual(
                    result.details['allowed'],
                    get_allowed_next_statuses(current, legacy_to_canonical(current)),
                )

    def test_cannot_hold_after_production_complete(self):
        for state in (OrderState.PRODUCTION_COMPLETE, OrderState.SHIPPED):
            with self.subTest(state=state):
                result = validate_transition(
                    'ready_for_shipment', 'on_hold', ready_context(), current_state=state
                )
                self.assertEqual(result.code, 'INVALID_TRANSITION')
                self.assertEqual(result.details['allowed'], ['completed'])

    def test_stored_terminal_state_wins(self):
        result = validate_transition(
            'ready_for_shipment', 'completed', ready_context(), current_state=OrderState.CANCELED
        )
        self.assertEqual(result.code, 'TERMINAL_STATE')

    def test_terminal_statuses_reject_everything(self):
        for current, target in product(['completed', 'canceled'], OrderStatus.values):
            with self.subTest(current=current, target=target):
                result = validate_transition(current, target, ready_context())
                self.assertEqual(result.code, 'TERMINAL_STATE')

    def test_same_and_unknown_status(self):
        self.assertEqual(validate_transition('new', 'new', ready_context()).code, 'SAME_STATUS')
        self.assertEqual(validate_transition('bogus', 'new', ready_context()).code, 'UNKNOWN_STATUS')
        self.assertEqual(validate_transition('new', 'bogus', ready_context()).code, 'UNKNOWN_STATUS')

    def test_start_production_requires_line_items(self):
        result = validate_transition('new', 'in_production', ready_context(line_items_count=0))
        self.assertEqual(result.code, 'NO_LINE_ITEMS')

    def test_production_readiness_preferences(self):
        strict = OrderPreferences(
            require_due_date_for_production=True,
            require_billing_address_for_production=True,
            require_shipping_address_for_production=True,
        )
        cases = [
            (dict(has_due_date=False), 'NO_DUE_DATE'),
            (dict(has_billing_address=False), 'NO_BILLING_ADDRESS'),
            (dict(has_shipping_address=False), 'NO_SHIPPING_ADDRESS'),
        ]
        for overrides, code in cases:
            with self.subTest(code=code):
                result = validate_transition('new', 'in_production', ready_context(preferences=strict, **overrides))
                self.assertEqual(result.code, code)

    def test_readiness_preferences_off_by_default(self):
        ctx = ready_context(has_due_date=False, has_billing_address=False, has_shipping_address=False)
        self.assertTrue(validate_transition('new', 'in_production', ctx).ok)

    def test_pickup_orders_skip_shipping_address(self):
        prefs = OrderPreferences(require_shipping_address_for_production=True)
        ctx = ready_context(preferences=prefs, has_shipping_address=False, shipping_method='pickup')
        self.assertTrue(validate_transition('new', 'in_production', ctx).ok)

    def test_missing_attachments_is_a_warning(self):
        result = validate_transition('new', 'in_production', ready_context(attachments_count=0))
        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, [NO_ATTACHMENTS_WARNING])

    def test_active_jobs_warn_on_ready_for_shipment(self):
        result = validate_transition('in_production', 'ready_for_shipment', ready_context(jobs_count=2))
        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, [ACTIVE_JOBS_WARNING])

    def test_ready_for_shipment_requires_finished_line_items(self):
        result = validate_transition(
            'in_production', 'ready_for_shipment', ready_context(incomplete_line_items_count=2)
        )
        self.assertEqual(result.code, 'LINE_ITEMS_NOT_COMPLETE')
        self.assertEqual(result.details, {'remainingCount': 2, 'canOverride': True})

        relaxed = ready_context(
            incomplete_line_items_count=2,
            preferences=OrderPreferences(require_all_line_items_done_to_complete=False),
        )
        self.assertTrue(validate_transition('in_production', 'ready_for_shipment', relaxed).ok)

    def test_ready_for_shipment_applies_readiness_preferences(self):
        prefs = OrderPreferences(require_billing_address_for_production=True)
        result = validate_transition(
            'in_production', 'ready_for_shipment',
            ready_context(preferences=prefs, has_billing_address=False),
        )
        self.assertEqual(result.code, 'NO_BILLING_ADDRESS')

    def test_resuming_production_from_hold_is_checked(self):
        prefs = OrderPreferences(require_due_date_for_production=True)
        no_due_date = validate_transition(
            'on_hold', 'in_production', ready_context(preferences=prefs, has_due_date=False)
        )
        self.assertEqual(no_due_date.code, 'NO_DUE_DATE')

        no_items = validate_transition('on_hold', 'in_production', ready_context(line_items_count=0))
        self.assertEqual(no_items.code, 'NO_LINE_ITEMS')

    def test_complete_with_unfinished_line_items(self):
        result = validate_transition(
            'ready_for_shipment', 'completed', ready_context(incomplete_line_items_count=3)
        )
        self.assertEqual(result.code, 'LINE_ITEMS_NOT_COMPLETE')
        self.assertEqual(result.details, {'incompleteCount': 3})

    def test_complete_with_unfinished_items_when_not_required(self):
        prefs = OrderPreferences(require_all_line_items_done_to_complete=False)
        ctx = ready_context(incomplete_line_items_count=3, preferences=prefs, has_shipped_at=True)
        self.assertTrue(validate_transition('ready_for_shipment', 'completed', ctx).ok)

    def test_complete_unshipped_order_warns(self):
        result = validate_transition('ready_for_shipment', 'completed', ready_context())
        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, [NOT_SHIPPED_WARNING])

        pickup = validate_transition('ready_for_shipment', 'completed', ready_context(shipping_method='pickup'))
        self.assertEqual(pickup.warnings, [])

        delivered = validate_transition(
            'ready_for_shipment', 'completed', ready_context(fulfillment_status='delivered')
        )
        self.assertEqual(delivered.warnings, [])


class CanonicalTransitionTest(SimpleTestCase):

    def test_graph_edges_are_accepted(self):
        ctx = ready_context(has_shipped_at=True)
        for current, targets in ALLOWED_STATE_TRANSITIONS.items():
            for target in targets:
                with self.subTest(current=current, target=target):
                    self.assertTrue(validate_state_transition(current, target, ctx).ok)

    def test_terminal_states_absorb(self):
        for current, target in product(['closed', 'canceled'], OrderState.values):
            with self.subTest(current=current, target=target):
                self.assertEqual(
                    validate_state_transition(current, target, ready_context()).code, 'TERMINAL_STATE'
                )

    def test_no_skipping_or_reversing(self):
        ctx = ready_context()
        self.assertEqual(validate_state_transition('open', 'closed', ctx).code, 'INVALID_TRANSITION')
        self.assertEqual(validate_state_transition('open', 'shipped', ctx).code, 'INVALID_TRANSITION')
        self.assertEqual(validate_state_transition('shipped', 'open', ctx).code, 'INVALID_TRANSITION')
        self.assertEqual(validate_state_transition('shipped', 'canceled', ctx).code, 'INVALID_TRANSITION')

    def test_same_and_unknown_state(self):
        self.assertEqual(validate_state_transition('open', 'open', ready_context()).code, 'SAME_STATE')
        self.assertEqual(validate_state_transition('open', 'archived', ready_context()).code, 'UNKNOWN_STATE')

    def test_remaining_line_items_block_production_complete(self):
        result = validate_state_transition(
            'open', 'production_complete', ready_context(incomplete_line_items_count=2)
        )
        self.assertEqual(result.code, 'LINE_ITEMS_NOT_COMPLETE')
        self.assertEqual(result.details, {'remainingCount': 2, 'canOverride': True})

    def test_auto_mark_overrides_remaining_line_items(self):
        ctx = ready_context(incomplete_line_items_count=2, auto_mark_remaining_done=True)
        self.assertTrue(validate_state_transition('open', 'production_complete', ctx).ok)

    def test_readiness_checked_before_line_items(self):
        prefs = OrderPreferences(require_due_date_for_production=True)
        ctx = ready_context(preferences=prefs, has_due_date=False, incomplete_line_items_count=2)
        self.assertEqual(validate_state_transition('open', 'production_complete', ctx).code, 'NO_DUE_DATE')

    def test_shipping_warns_when_fulfillment_not_shipped(self):
        result = validate_state_transition('production_complete', 'shipped', ready_context())
        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, [FULFILLMENT_NOT_SHIPPED_WARNING])

        shipped = validate_state_transition(
            'production_complete', 'shipped', ready_context(fulfillment_status='shipped')
        )
        self.assertEqual(shipped.warnings, [])


class OrderEditGuardTest(SimpleTestCase):

    def test_open_orders_are_editable(self):
        self.assertTrue(validate_order_edit('open', False, OrderPreferences()).ok)
        self.assertTrue(validate_order_edit('shipped', False, OrderPreferences()).ok)

    def test_terminal_orders_locked_for_regular_users(self):
        prefs = OrderPreferences(allow_completed_order_edits=True)
        self.assertEqual(validate_order_edit('closed', False, prefs).code, 'ORDER_LOCKED')

    def test_elevated_users_need_the_preference(self):
        self.assertEqual(
            validate_order_edit('canceled', True, OrderPreferences()).code, 'ORDER_LOCKED_SETTING_DISABLED'
        )
        prefs = OrderPreferences(allow_completed_order_edits=True)
        self.assertTrue(validate_order_edit('closed', True, prefs).ok)


class MappingHelpersTest(SimpleTestCase):

    def test_canonical_to_legacy(self):
        self.assertEqual(canonical_to_legacy('open'), 'in_production')
        self.assertEqual(canonical_to_legacy('production_complete'), 'ready_for_shipment')
        self.assertEqual(canonical_to_legacy('shipped'), 'ready_for_shipment')
        self.assertEqual(canonical_to_legacy('closed'), 'completed')
        self.assertEqual(canonical_to_legacy('canceled'), 'canceled')
        with self.assertRaises(ValueError):
            canonical_to_legacy('archived')

    def test_legacy_to_canonical(self):
        self.assertEqual(legacy_to_canonical('new'), 'open')
        self.assertEqual(legacy_to_canonical('on_hold'), 'open')
        self.assertEqual(legacy_to_canonical('ready_for_shipment'), 'production_complete')
        self.assertEqual(legacy_to_canonical('completed'), 'closed')
        with self.assertRaises(ValueError):
            legacy_to_canonical('shipped')

    def test_mapping_preserves_terminality(self):
        for state in OrderState.values:
            self.assertEqual(is_terminal_state(state), is_terminal_status(canonical_to_legacy(state)))

    def test_routing_target(self):
        self.assertEqual(determine_routing_target('pickup'), 'invoicing')
        self.assertEqual(determine_routing_target('ship'), 'fulfillment')
        self.assertEqual(determine_routing_target('deliver'), 'fulfillment')
        self.assertEqual(determine_routing_target(None), 'fulfillment')

    def test_allowed_next_lists(self):
        self.assertEqual(get_allowed_next_statuses('new'), ['in_production', 'on_hold', 'canceled'])
        self.assertEqual(get_allowed_next_statuses('ready_for_shipment'), ['completed', 'on_hold'])
        self.assertEqual(get_allowed_next_statuses('ready_for_shipment', 'shipped'), ['completed'])
        self.assertEqual(get_allowed_next_states('production_complete'), ['shipped', 'closed', 'canceled'])
        self.assertEqual(get_allowed_next_states('closed'), [])


class DeterminismTest(SimpleTestCase):

    def test_same_inputs_same_verdict(self):
        contexts = [
            ready_context(),
            ready_context(line_items_count=0, attachments_count=0),
            ready_context(incomplete_line_items_count=4, jobs_count=1),
            ready_context(preferences=OrderPreferences(require_due_date_for_production=True), has_due_date=False),
        ]
        for ctx, current, target in product(contexts, OrderStatus.values, OrderStatus.values):
            self.assertEqual(validate_transition(current, target, ctx), validate_transition(current, target, ctx))
        for ctx, current, target in product(contexts, OrderState.values, OrderState.values):
            self.assertEqual(
                validate_state_transition(current, target, ctx),
                validate_state_transition(current, target, ctx),
            )
