import re
import uuid
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from masters.models import PriceMapping
from masters.tests.factories import create_lens_masters
from sale_orders.models import SaleOrder
from sale_orders.services.exceptions import (
    ConflictError,
    CreditLimitExceededError,
    InvalidStatusTransitionError,
    OrderLockedError,
    PriceNotConfiguredError,
    RecordNotFoundError,
    SaleOrderNotFoundError,
    SaleOrderValidationError,
    StaleOrderStatusError,
)
from sale_orders.services.sale_order_service import (
    _compare_and_set_status,
    advance_status,
    calculate_cost,
    calculate_order_pricing,
    create_sale_order,
    delete_sale_order,
    get_sale_order,
    list_sale_orders,
    sale_order_statistics,
    update_dispatch_info,
    update_sale_order,
)
from sale_orders.tests.factories import future_date, order_payload

User = get_user_model()

DRAFT = SaleOrder.STATUS_DRAFT
IN_PRODUCTION = SaleOrder.STATUS_IN_PRODUCTION
READY = SaleOrder.STATUS_READY_FOR_DISPATCH
DELIVERED = SaleOrder.STATUS_DELIVERED


class SaleOrderServiceTestBase(TestCase):
    def setUp(self):
        self.m = create_lens_masters()
        self.user = User.objects.create_user(
            email="sales@example.com",
            password="pass",
            role="sales",
        )

    def create_order(self, **overrides):
        return create_sale_order(payload=order_payload(self.m, **overrides), user=self.user)

    def create_dispatchable_order(self, **overrides):
        return self.create_order(dispatchStatus="Pending", estimatedDate=future_date(), **overrides)

    def deliver(self, order):
        for target in (IN_PRODUCTION, READY, DELIVERED):
            order = advance_status(order_id=order.pk, target_status=target, user=self.user)
        return order


class CreateSaleOrderTests(SaleOrderServiceTestBase):
    def test_create_generates_order_numbers(self):
        first = self.create_order()
        second = self.create_order()

        self.assertRegex(first.order_no, r"^SO-\d{4}-001$")
        self.assertRegex(second.order_no, r"^SO-\d{4}-002$")
        self.assertEqual(first.status, DRAFT)
        self.assertEqual(first.created_by, self.user)
        self.assertEqual(first.customer_id, self.m.customer.id)
        self.assertEqual(first.right_spherical, Decimal("-2.25"))

    def test_status_defaults_to_draft(self):
        order = self.create_order(status=None)
        self.assertEqual(order.status, DRAFT)

    def test_create_attaches_customer_standing(self):
        order = self.create_order()

        self.assertFalse(order.customer_standing.exceeds_limit)
        self.assertEqual(order.customer_standing.customer_id, self.m.customer.id)

    def test_create_collects_all_errors(self):
        with self.assertRaises(SaleOrderValidationError) as ctx:
            self.create_order(rightEye=False, leftEye=False, lensId=None, discount="101")

        self.assertEqual(set(ctx.exception.errors), {"eyeSelection", "lensId", "discount"})
        self.assertEqual(SaleOrder.objects.count(), 0)

    def test_cannot_create_delivered_order(self):
        with self.assertRaises(SaleOrderValidationError) as ctx:
            self.create_order(status=DELIVERED)

        self.assertEqual(ctx.exception.errors["status"], "Orders cannot be created as DELIVERED")

    def test_unknown_reference(self):
        with self.assertRaises(RecordNotFoundError) as ctx:
            self.create_order(lensId=9999)

        self.assertEqual(ctx.exception.field, "lensId")
        self.assertEqual(SaleOrder.objects.count(), 0)

    def test_inactive_reference(self):
        self.m.dia.is_active = False
        self.m.dia.save()

        with self.assertRaises(RecordNotFoundError) as ctx:
            self.create_order()

        self.assertEqual(ctx.exception.field, "diaId")

    def test_unknown_assigned_person(self):
        with self.assertRaises(RecordNotFoundError) as ctx:
            self.create_order(assignedPersonId=str(uuid.uuid4()))

        self.assertEqual(ctx.exception.field, "assignedPersonId")

    def test_assigned_person(self):
        order = self.create_order(assignedPersonId=str(self.user.pk))
        self.assertEqual(order.assigned_person, self.user)

    def test_deselected_eye_is_cleared(self):
        order = self.create_order(leftEye=False, leftSpherical="99", leftBase="stale")

        self.assertIsNone(order.left_spherical)
        self.assertEqual(order.left_base, "")

    def test_can_create_ready_for_dispatch_with_dispatch_block(self):
        order = self.create_dispatchable_order(status=READY)
        self.assertEqual(order.status, READY)

    def test_amounts_too_large_for_storage_are_rejected(self):
        for overrides, field in (
            ({"lensPrice": "1e40"}, "lensPrice"),
            ({"fittingPrice": "12345678901234"}, "fittingPrice"),
            ({"additionalPrice": [{"name": "Courier", "value": "1e40"}]}, "additionalPrice[0].value"),
        ):
            with self.subTest(field=field):
                with self.assertRaises(SaleOrderValidationError) as ctx:
                    self.create_order(**overrides)

                self.assertIn(field, ctx.exception.errors)

        self.assertEqual(SaleOrder.objects.count(), 0)

    def test_largest_storable_amount_round_trips(self):
        order = self.create_order(fittingPrice="9999999999.99")

        order.refresh_from_db()
        self.assertEqual(order.fitting_price, Decimal("9999999999.99"))

    def test_blank_dispatch_status_defaults_to_pending(self):
        order = self.create_order(dispatchStatus=None)

        order.refresh_from_db()
        self.assertEqual(order.dispatch_status, SaleOrder.DISPATCH_PENDING)
        self.assertNotIn("", sale_order_statistics()["byDispatchStatus"])

    # =====================================================
    # CREDIT GATE
    # =====================================================

    def test_credit_limit_is_advisory_by_default(self):
        self.m.customer.outstanding_credit = Decimal("60000.00")
        self.m.customer.save()

        order = self.create_order()

        self.assertTrue(order.customer_standing.exceeds_limit)

    def test_credit_limit_blocks_when_requested(self):
        self.m.customer.outstanding_credit = Decimal("60000.00")
        self.m.customer.save()

        with self.assertRaises(CreditLimitExceededError):
            create_sale_order(
                payload=order_payload(self.m),
                user=self.user,
                allow_exceed_credit_limit=False,
            )

        self.assertEqual(SaleOrder.objects.count(), 0)


class UpdateSaleOrderTests(SaleOrderServiceTestBase):
    def test_update_merges_over_stored_values(self):
        order = self.create_order(remark="first")

        updated = update_sale_order(
            order_id=order.pk,
            payload={"remark": "second", "rightAxis": "100"},
            user=self.user,
        )

        self.assertEqual(updated.remark, "second")
        self.assertEqual(updated.right_axis, Decimal("100.00"))
        self.assertEqual(updated.right_spherical, Decimal("-2.25"))
        self.assertEqual(updated.order_no, order.order_no)

    def test_update_ignores_status(self):
        order = self.create_order()

        updated = update_sale_order(order_id=order.pk, payload={"status": DELIVERED}, user=self.user)

        self.assertEqual(updated.status, DRAFT)

    def test_update_validates_merged_payload(self):
        order = self.create_order()

        with self.assertRaises(SaleOrderValidationError) as ctx:
            update_sale_order(order_id=order.pk, payload={"rightEye": False, "leftEye": False})

        self.assertIn("eyeSelection", ctx.exception.errors)

    def test_ready_order_keeps_estimated_date_required(self):
        order = self.create_dispatchable_order(status=READY)

        with self.assertRaises(SaleOrderValidationError) as ctx:
            update_sale_order(order_id=order.pk, payload={"estimatedDate": None})

        self.assertEqual(ctx.exception.errors, {"estimatedDate": "Estimated date is required"})

    def test_draft_order_may_clear_estimated_date(self):
        order = self.create_dispatchable_order()

        updated = update_sale_order(order_id=order.pk, payload={"estimatedDate": None})

        self.assertIsNone(updated.estimated_date)

    def test_untouched_retired_reference_stays_valid(self):
        order = self.create_order()
        self.m.lens.is_active = False
        self.m.lens.save()

        updated = update_sale_order(order_id=order.pk, payload={"remark": "still fine"})

        self.assertEqual(updated.lens_id, self.m.lens.id)

    def test_delivered_order_is_locked(self):
        order = self.deliver(self.create_dispatchable_order())

        with self.assertRaises(OrderLockedError):
            update_sale_order(order_id=order.pk, payload={"remark": "late change"})

    def test_missing_order(self):
        with self.assertRaises(SaleOrderNotFoundError):
            update_sale_order(order_id=9999, payload={"remark": "x"})

    def test_dispatch_update_touches_dispatch_fields_only(self):
        order = self.create_order(remark="keep")

        updated = update_dispatch_info(
            order_id=order.pk,
            payload={"dispatchStatus": "In Transit", "dispatchId": "DSP-9", "remark": "ignored"},
            user=self.user,
        )

        self.assertEqual(updated.dispatch_status, "In Transit")
        self.assertEqual(updated.dispatch_id, "DSP-9")
        self.assertEqual(updated.remark, "keep")

    def test_dispatch_update_validates(self):
        order = self.create_order()

        with self.assertRaises(SaleOrderValidationError) as ctx:
            update_dispatch_info(order_id=order.pk, payload={"dispatchStatus": "Lost"})

        self.assertIn("dispatchStatus", ctx.exception.errors)

    def test_dispatch_update_with_blank_status_resets_to_pending(self):
        order = self.create_order(dispatchStatus="Assigned")

        updated = update_dispatch_info(order_id=order.pk, payload={"dispatchStatus": None})

        updated.refresh_from_db()
        self.assertEqual(updated.dispatch_status, SaleOrder.DISPATCH_PENDING)


class SaleOrderLifecycleServiceTests(SaleOrderServiceTestBase):
    def test_full_lifecycle(self):
        order = self.create_dispatchable_order()

        for target in (SaleOrder.STATUS_CONFIRMED, IN_PRODUCTION, READY, DELIVERED):
            order = advance_status(order_id=order.pk, target_status=target, user=self.user)
            self.assertEqual(order.status, target)

        self.assertTrue(order.is_locked)

    def test_cannot_skip_production(self):
        order = self.create_dispatchable_order()

        with self.assertRaises(InvalidStatusTransitionError):
            advance_status(order_id=order.pk, target_status=READY)

        order.refresh_from_db()
        self.assertEqual(order.status, DRAFT)

    def test_delivered_cannot_move(self):
        order = self.deliver(self.create_dispatchable_order())

        with self.assertRaises(InvalidStatusTransitionError):
            advance_status(order_id=order.pk, target_status=READY)

    def test_ready_requires_estimated_date(self):
        order = self.create_order()
        advance_status(order_id=order.pk, target_status=IN_PRODUCTION)

        with self.assertRaises(SaleOrderValidationError) as ctx:
            advance_status(order_id=order.pk, target_status=READY)

        self.assertIn("estimatedDate", ctx.exception.errors)
        order.refresh_from_db()
        self.assertEqual(order.status, IN_PRODUCTION)

    def test_stale_expected_status(self):
        order = self.create_dispatchable_order()

        with self.assertRaises(StaleOrderStatusError):
            advance_status(
                order_id=order.pk,
                target_status=READY,
                expected_current_status=IN_PRODUCTION,
            )

    def test_repeated_advance_from_same_status_is_rejected(self):
        order = self.create_dispatchable_order()
        advance_status(order_id=order.pk, target_status=IN_PRODUCTION)

        first = advance_status(
            order_id=order.pk,
            target_status=READY,
            expected_current_status=IN_PRODUCTION,
        )
        self.assertEqual(first.status, READY)

        with self.assertRaises(ConflictError):
            advance_status(
                order_id=order.pk,
                target_status=READY,
                expected_current_status=IN_PRODUCTION,
            )

        order.refresh_from_db()
        self.assertEqual(order.status, READY)

    def test_losing_the_status_race_is_a_conflict(self):
        order = self.create_dispatchable_order(status=IN_PRODUCTION)
        # read before another user advances the row
        stale = get_sale_order(order.pk)
        advance_status(order_id=order.pk, target_status=READY, user=self.user)

        with mock.patch(
            "sale_orders.services.sale_order_service.get_sale_order",
            return_value=stale,
        ):
            with self.assertLogs("sale_orders.services.sale_order_service", level="WARNING") as logs:
                with self.assertRaises(StaleOrderStatusError):
                    advance_status(
                        order_id=order.pk,
                        target_status=READY,
                        user=self.user,
                        expected_current_status=IN_PRODUCTION,
                    )

        self.assertIn("Sale order status conflict", logs.output[0])
        order.refresh_from_db()
        self.assertEqual(order.status, READY)

    def test_compare_and_set_status(self):
        order = self.create_order(status=IN_PRODUCTION)

        self.assertTrue(
            _compare_and_set_status(order_id=order.pk, from_status=IN_PRODUCTION, to_status=READY)
        )
        self.assertFalse(
            _compare_and_set_status(order_id=order.pk, from_status=IN_PRODUCTION, to_status=READY)
        )

    def test_soft_delete(self):
        order = self.create_order()

        delete_sale_order(order_id=order.pk, user=self.user)

        with self.assertRaises(SaleOrderNotFoundError):
            get_sale_order(order.pk)
        self.assertTrue(SaleOrder.objects.get(pk=order.pk).is_deleted)

    def test_delivered_order_cannot_be_deleted(self):
        order = self.deliver(self.create_dispatchable_order())

        with self.assertRaises(OrderLockedError):
            delete_sale_order(order_id=order.pk)


class SaleOrderPricingServiceTests(SaleOrderServiceTestBase):
    def test_saved_order_pricing(self):
        order = self.create_order()

        quote = calculate_order_pricing(order_id=order.pk).as_dict()

        self.assertEqual(quote["priceRecordId"], self.m.price.pk)
        self.assertEqual(quote["pairPrice"], "1000.00")
        self.assertEqual(quote["lensPrice"], "1000.00")
        self.assertEqual(quote["fittingPrice"], "200.00")
        self.assertEqual(quote["subtotal"], "1200.00")
        self.assertEqual(quote["finalTotal"], "1200.00")
        self.assertEqual(quote["discountSource"], "order")

    def test_draft_payload_with_free_lens_and_order_discount(self):
        quote = calculate_order_pricing(
            payload=order_payload(self.m, freeLens=True, discount="10")
        ).as_dict()

        self.assertEqual(quote["waived"], "1000.00")
        self.assertEqual(quote["discountAmount"], "20.00")
        self.assertEqual(quote["finalTotal"], "180.00")

    def test_one_eye_is_half_the_pair_price(self):
        quote = calculate_order_pricing(payload=order_payload(self.m, leftEye=False)).as_dict()

        self.assertEqual(quote["lensPrice"], "500.00")
        self.assertEqual(quote["finalTotal"], "700.00")

    def test_customer_mapping_overrides_order_discount(self):
        PriceMapping.objects.create(
            customer=self.m.customer,
            lens_price=self.m.price,
            discount_rate=Decimal("20"),
        )

        quote = calculate_order_pricing(payload=order_payload(self.m, discount="5")).as_dict()

        self.assertEqual(quote["discount"], "20.00")
        self.assertEqual(quote["discountSource"], "customer")
        self.assertEqual(quote["finalTotal"], "960.00")

    def test_missing_price_is_reported_not_zero(self):
        with self.assertRaises(PriceNotConfiguredError):
            calculate_order_pricing(payload=order_payload(self.m, coatingId=self.m.bare_coating.id))

    def test_pricing_overlay_on_saved_order(self):
        order = self.create_order()

        quote = calculate_order_pricing(order_id=order.pk, payload={"freeFitting": True}).as_dict()

        self.assertEqual(quote["finalTotal"], "1000.00")
        order.refresh_from_db()
        self.assertFalse(order.free_fitting)

    def test_calculate_cost_with_mapping(self):
        PriceMapping.objects.create(
            customer=self.m.customer,
            lens_price=self.m.price,
            discount_rate=Decimal("10"),
        )

        quote = calculate_cost(
            customer_id=self.m.customer.id,
            price_record_id=self.m.price.pk,
            fitting_id=self.m.fitting.id,
            quantity=2,
        ).as_dict()

        self.assertTrue(quote["hasPriceMapping"])
        self.assertEqual(quote["lensCostWithoutDiscount"], "2000.00")
        self.assertEqual(quote["discountAmount"], "200.00")
        self.assertEqual(quote["totalFittingPrice"], "400.00")
        self.assertEqual(quote["costWithoutDiscount"], "2400.00")
        self.assertEqual(quote["finalCost"], "2200.00")

    def test_calculate_cost_without_mapping(self):
        quote = calculate_cost(
            customer_id=self.m.customer.id,
            price_record_id=self.m.price.pk,
            fitting_id=self.m.fitting.id,
        ).as_dict()

        self.assertFalse(quote["hasPriceMapping"])
        self.assertEqual(quote["discountRate"], "0.00")
        self.assertEqual(quote["finalCost"], "1200.00")

    def test_calculate_cost_rejects_bad_input(self):
        with self.assertRaises(SaleOrderValidationError) as ctx:
            calculate_cost(customer_id="abc", price_record_id=None, fitting_id=1, quantity=0)

        self.assertEqual(set(ctx.exception.errors), {"customerId", "priceRecordId", "quantity"})

    def test_calculate_cost_quantity_must_be_a_whole_number(self):
        for quantity in (True, 2.7, "1.5", "abc"):
            with self.subTest(quantity=quantity):
                with self.assertRaises(SaleOrderValidationError) as ctx:
                    calculate_cost(
                        customer_id=self.m.customer.id,
                        price_record_id=self.m.price.pk,
                        fitting_id=self.m.fitting.id,
                        quantity=quantity,
                    )

                self.assertEqual(
                    ctx.exception.errors,
                    {"quantity": "quantity must be a positive integer"},
                )

        quote = calculate_cost(
            customer_id=self.m.customer.id,
            price_record_id=self.m.price.pk,
            fitting_id=self.m.fitting.id,
            quantity="2",
        )
        self.assertEqual(quote.quantity, 2)

    def test_calculate_cost_rejects_totals_too_large_to_store(self):
        with self.assertRaises(SaleOrderValidationError) as ctx:
            calculate_cost(
                customer_id=self.m.customer.id,
                price_record_id=self.m.price.pk,
                fitting_id=self.m.fitting.id,
                quantity=10**12,
            )

        self.assertEqual(ctx.exception.errors, {"quantity": "quantity is too large"})


class SaleOrderQueryTests(SaleOrderServiceTestBase):
    def test_list_filters(self):
        first = self.create_order(customerRefNo="REF-A")
        self.create_order(customerRefNo="REF-B")
        advance_status(order_id=first.pk, target_status=IN_PRODUCTION)

        self.assertEqual(list_sale_orders({"status": IN_PRODUCTION}).count(), 1)
        self.assertEqual(list_sale_orders({"search": "ref-b"}).count(), 1)
        self.assertEqual(list_sale_orders({"search": "CUST-001"}).count(), 2)
        self.assertEqual(list_sale_orders({"customerId": str(self.m.customer.id)}).count(), 2)
        self.assertEqual(list_sale_orders({"endDate": "2024-01-09"}).count(), 0)

    def test_list_rejects_bad_date(self):
        with self.assertRaises(SaleOrderValidationError):
            list_sale_orders({"startDate": "yesterday"})

    def test_list_hides_deleted(self):
        order = self.create_order()
        delete_sale_order(order_id=order.pk)

        self.assertEqual(list_sale_orders().count(), 0)

    def test_statistics(self):
        first = self.create_order(lensPrice="1000")
        self.create_order(lensPrice="500.50")
        advance_status(order_id=first.pk, target_status=IN_PRODUCTION)

        stats = sale_order_statistics()

        self.assertEqual(stats["totalOrders"], 2)
        self.assertEqual(stats["byStatus"][DRAFT], 1)
        self.assertEqual(stats["byStatus"][IN_PRODUCTION], 1)
        self.assertEqual(stats["byStatus"][DELIVERED], 0)
        self.assertEqual(stats["byDispatchStatus"]["Pending"], 2)
        self.assertEqual(stats["totalRevenue"], "1500.50")
        self.assertTrue(re.match(r"^\d+\.\d{2}$", stats["totalRevenue"]))
