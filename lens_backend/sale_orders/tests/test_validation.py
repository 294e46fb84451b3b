from datetime import date, timedelta

from django.test import SimpleTestCase

from sale_orders.models import SaleOrder
from sale_orders.services.order_validation import (
    DATE_ORDER_MESSAGE,
    EYE_SELECTION_MESSAGE,
    newly_required_fields,
    validate_dispatch_update,
    validate_pricing_request,
    validate_sale_order,
    validate_status_requirements,
)
from sale_orders.services.payload import normalize_payload
from sale_orders.tests.factories import order_payload

TODAY = date(2024, 1, 15)
READY = SaleOrder.STATUS_READY_FOR_DISPATCH


def validate(**overrides):
    return validate_sale_order(order_payload(**overrides), today=TODAY)


class SaleOrderValidationTests(SimpleTestCase):
    def test_valid_draft(self):
        self.assertEqual(validate(), {})

    def test_missing_required_fields(self):
        errors = validate(customerId=None, lensId="", coatingId=None)

        self.assertEqual(errors["customerId"], "Customer is required")
        self.assertEqual(errors["lensId"], "Lens is required")
        self.assertEqual(errors["coatingId"], "Coating is required")

    def test_free_fitting_drops_fitting_requirement(self):
        self.assertIn("fittingId", validate(fittingId=None))
        self.assertEqual(validate(fittingId=None, freeFitting=True), {})

    def test_invalid_ids_and_flags(self):
        errors = validate(lensId="abc", diaId=0, urgentOrder="yes")

        self.assertEqual(errors["lensId"], "lensId must be a valid id")
        self.assertEqual(errors["diaId"], "diaId must be a valid id")
        self.assertEqual(errors["urgentOrder"], "urgentOrder must be a boolean value")

    def test_unknown_status(self):
        errors = validate(status="SHIPPED")
        self.assertTrue(errors["status"].startswith("Invalid status"))

    # =====================================================
    # EYES
    # =====================================================

    def test_no_eye_selected(self):
        errors = validate(rightEye=False, leftEye=False)
        self.assertEqual(errors["eyeSelection"], EYE_SELECTION_MESSAGE)

    def test_no_eye_selected_reported_with_other_errors(self):
        errors = validate(rightEye=False, leftEye=False, customerId=None, remark="x" * 501)

        self.assertEqual(set(errors), {"eyeSelection", "customerId", "remark"})

    def test_active_eye_is_range_checked(self):
        errors = validate(rightSpherical="20.25", rightAxis=None)

        self.assertEqual(errors["rightSpherical"], "out of range: expected [-20.0, 20.0]")
        self.assertEqual(errors["rightAxis"], "required")

    def test_inactive_eye_is_not_checked(self):
        errors = validate(leftEye=False, leftSpherical="99", leftAxis="abc")
        self.assertEqual(errors, {})

    # =====================================================
    # DATES
    # =====================================================

    def test_delivery_before_order_date(self):
        errors = validate(orderDate="2024-01-10", deliverySchedule="2024-01-05T00:00")
        self.assertEqual(errors["deliverySchedule"], DATE_ORDER_MESSAGE)

    def test_delivery_on_or_after_order_date(self):
        self.assertEqual(validate(orderDate="2024-01-10", deliverySchedule="2024-01-15T00:00"), {})
        self.assertEqual(validate(orderDate="2024-01-10", deliverySchedule="2024-01-10T09:00:00"), {})

    def test_invalid_date_formats(self):
        errors = validate(orderDate="10/01/2024", deliverySchedule="tomorrow")

        self.assertEqual(errors["orderDate"], "Invalid order date format")
        self.assertEqual(errors["deliverySchedule"], "Invalid delivery schedule format")

    # =====================================================
    # STATUS-DEPENDENT REQUIREMENTS
    # =====================================================

    def test_ready_for_dispatch_requires_estimated_date(self):
        errors = validate(status=READY, dispatchStatus="Pending")
        self.assertEqual(errors, {"estimatedDate": "Estimated date is required"})

    def test_draft_does_not_require_estimated_date(self):
        self.assertNotIn("estimatedDate", validate(status=SaleOrder.STATUS_DRAFT))

    def test_ready_for_dispatch_rejects_past_estimated_date(self):
        past = (TODAY - timedelta(days=1)).isoformat()
        errors = validate(status=READY, dispatchStatus="Pending", estimatedDate=past)

        self.assertEqual(errors["estimatedDate"], "Estimated date cannot be in the past")

    def test_ready_for_dispatch_with_dispatch_block(self):
        errors = validate(status=READY, dispatchStatus="Pending", estimatedDate=TODAY.isoformat())
        self.assertEqual(errors, {})

    def test_invalid_dispatch_values(self):
        errors = validate(dispatchStatus="Lost", assignedPersonId="42")

        self.assertTrue(errors["dispatchStatus"].startswith("Invalid dispatch status"))
        self.assertEqual(errors["assignedPersonId"], "assignedPersonId must be a valid user id")

    def test_newly_required_fields(self):
        self.assertEqual(
            set(newly_required_fields(SaleOrder.STATUS_IN_PRODUCTION, READY)),
            {"dispatchStatus", "estimatedDate"},
        )
        self.assertEqual(newly_required_fields(READY, SaleOrder.STATUS_DELIVERED), {})

    def test_status_requirements_only_report_required_fields(self):
        data = order_payload(dispatchStatus="Pending", estimatedDate=None, remark="x" * 600)

        errors = validate_status_requirements(
            data,
            required=newly_required_fields(SaleOrder.STATUS_IN_PRODUCTION, READY),
            today=TODAY,
        )

        self.assertEqual(errors, {"estimatedDate": "Estimated date is required"})

    # =====================================================
    # TEXT + PRICING
    # =====================================================

    def test_text_limits(self):
        errors = validate(remark="x" * 501, customerRefNo="r" * 101, rightBaseSize="b" * 51)

        self.assertEqual(errors["remark"], "remark must not exceed 500 characters")
        self.assertEqual(errors["customerRefNo"], "customerRefNo must not exceed 100 characters")
        self.assertEqual(errors["rightBaseSize"], "rightBaseSize must not exceed 50 characters")

    def test_pricing_inputs(self):
        errors = validate(
            discount="150",
            fittingPrice="-1",
            additionalPrice=[{"name": "Courier", "value": "x"}],
        )

        self.assertEqual(errors["discount"], "Discount must be between 0 and 100")
        self.assertEqual(errors["fittingPrice"], "fittingPrice must be non-negative")
        self.assertEqual(errors["additionalPrice[0].value"], "value must be a valid number")

    def test_pricing_inputs_must_fit_money_columns(self):
        errors = validate(
            lensPrice="1e40",
            fittingPrice="12345678901234",
            tintingPrice="9999999999.99",
            additionalPrice=[{"name": "Courier", "value": "1e40"}],
        )

        self.assertEqual(errors["lensPrice"], "lensPrice is too large")
        self.assertEqual(errors["fittingPrice"], "fittingPrice is too large")
        self.assertEqual(errors["additionalPrice[0].value"], "value is too large")
        self.assertNotIn("tintingPrice", errors)

    def test_dispatch_update_validation(self):
        errors = validate_dispatch_update(
            {"dispatchStatus": "Pending", "estimatedDate": None, "dispatchNotes": "n" * 501},
            status=READY,
            today=TODAY,
        )

        self.assertEqual(
            errors,
            {
                "estimatedDate": "Estimated date is required",
                "dispatchNotes": "dispatchNotes must not exceed 500 characters",
            },
        )

    def test_pricing_request_needs_minimum(self):
        errors = validate_pricing_request({"rightEye": False, "leftEye": False})

        self.assertEqual(
            set(errors),
            {"customerId", "lensId", "coatingId", "eyeSelection"},
        )


class PayloadNormalizationTests(SimpleTestCase):
    def test_legacy_aliases_and_unknown_keys(self):
        data = normalize_payload(
            {"lens_id": 3, "Type_id": 4, "orderNo": "SO-2024-009", "customerName": "x"}
        )

        self.assertEqual(data, {"lensId": 3, "typeId": 4})
