from decimal import Decimal

from django.test import SimpleTestCase

from sale_orders.services.exceptions import PriceNotConfiguredError, PricingInputError
from sale_orders.services.pricing import (
    EYE_SELECTION_MESSAGE,
    AdditionalCharge,
    PricingInput,
    base_price_for_eyes,
    calculate_price,
    parse_additional_charges,
)

D = Decimal


class PricingCalculatorTests(SimpleTestCase):
    """
    GUARANTEES:
    - waivers come off before the discount
    - rounding happens only when the result is presented
    """

    def test_plain_order(self):
        result = calculate_price(
            PricingInput(
                base_price=D("1000"),
                fitting_price=D("200"),
                tinting_price=D("150"),
                additional_charges=(AdditionalCharge("Edge polish", D("50")),),
            )
        )

        self.assertEqual(result.subtotal, D("1400"))
        self.assertEqual(result.waived, D("0"))
        self.assertEqual(result.final_total, D("1400"))

    def test_additional_charge_without_discount(self):
        result = calculate_price(
            PricingInput(
                base_price=D("1000"),
                additional_charges=(AdditionalCharge("Edge polish", D("50")),),
            )
        )

        self.assertEqual(result.subtotal, D("1050"))
        self.assertEqual(result.final_total, D("1050"))

    def test_free_lens_then_discount(self):
        result = calculate_price(
            PricingInput(
                base_price=D("1000"),
                fitting_price=D("200"),
                discount_percent=D("10"),
                free_lens=True,
            )
        )

        self.assertEqual(result.subtotal, D("1200"))
        self.assertEqual(result.waived, D("1000"))
        self.assertEqual(result.discount_base, D("200"))
        self.assertEqual(result.discount_amount, D("20"))
        self.assertEqual(result.final_total, D("180"))

    def test_free_lens_and_free_fitting_leave_only_extras(self):
        result = calculate_price(
            PricingInput(
                base_price=D("1000"),
                fitting_price=D("200"),
                tinting_price=D("80"),
                additional_charges=(AdditionalCharge("Courier", D("20")),),
                discount_percent=D("50"),
                free_lens=True,
                free_fitting=True,
            )
        )

        self.assertEqual(result.waived, D("1200"))
        self.assertEqual(result.discount_base, D("100"))
        self.assertEqual(result.final_total, D("50"))

    def test_full_discount_is_zero_total(self):
        result = calculate_price(PricingInput(base_price=D("750"), discount_percent=D("100")))
        self.assertEqual(result.final_total, D("0"))

    def test_full_precision_until_rounded(self):
        result = calculate_price(PricingInput(base_price=D("333.33"), discount_percent=D("10")))

        self.assertEqual(result.discount_amount, D("33.333"))
        self.assertEqual(result.final_total, D("299.997"))

        self.assertEqual(result.rounded().final_total, D("300.00"))
        self.assertEqual(
            result.as_dict(),
            {
                "subtotal": "333.33",
                "waived": "0.00",
                "discountBase": "333.33",
                "discountAmount": "33.33",
                "finalTotal": "300.00",
            },
        )

    def test_rounding_is_half_up(self):
        result = calculate_price(PricingInput(base_price=D("0.125")))
        self.assertEqual(result.as_dict()["finalTotal"], "0.13")

    # =====================================================
    # REJECTIONS
    # =====================================================

    def test_zero_base_price_is_not_configured(self):
        with self.assertRaises(PriceNotConfiguredError) as ctx:
            calculate_price(PricingInput(base_price=D("0"), fitting_price=D("200")))

        self.assertEqual(ctx.exception.field, "lensPrice")

    def test_discount_out_of_range(self):
        for rate in (D("-1"), D("100.01")):
            with self.subTest(rate=rate):
                with self.assertRaises(PricingInputError) as ctx:
                    calculate_price(PricingInput(base_price=D("100"), discount_percent=rate))

                self.assertEqual(ctx.exception.errors, {"discount": "Discount must be between 0 and 100"})

    def test_negative_components_reported_together(self):
        with self.assertRaises(PricingInputError) as ctx:
            calculate_price(
                PricingInput(
                    base_price=D("100"),
                    fitting_price=D("-1"),
                    additional_charges=(AdditionalCharge("Courier", D("-5")),),
                )
            )

        self.assertEqual(
            set(ctx.exception.errors),
            {"fittingPrice", "additionalPrice[0].value"},
        )

    def test_components_above_money_limit(self):
        with self.assertRaises(PricingInputError) as ctx:
            calculate_price(
                PricingInput(
                    base_price=D("1e40"),
                    tinting_price=D("10000000000"),
                )
            )

        self.assertEqual(
            ctx.exception.errors,
            {"lensPrice": "lensPrice is too large", "tintingPrice": "tintingPrice is too large"},
        )


class EyeBasePriceTests(SimpleTestCase):
    def test_pair_price_for_both_eyes(self):
        self.assertEqual(base_price_for_eyes(D("1000"), True, True), D("1000"))

    def test_half_price_for_one_eye(self):
        self.assertEqual(base_price_for_eyes(D("1000"), True, False), D("500"))
        self.assertEqual(base_price_for_eyes(D("999"), False, True), D("499.5"))

    def test_no_eye_selected_is_an_input_error(self):
        with self.assertRaises(PricingInputError) as ctx:
            base_price_for_eyes(D("1000"), False, False)

        self.assertEqual(ctx.exception.errors, {"eyeSelection": EYE_SELECTION_MESSAGE})


class AdditionalChargeParsingTests(SimpleTestCase):
    def test_parses_items(self):
        charges = parse_additional_charges(
            [{"name": " Edge polish ", "value": "50"}, {"name": "Courier", "value": 20}]
        )

        self.assertEqual(
            charges,
            (AdditionalCharge("Edge polish", D("50")), AdditionalCharge("Courier", D("20"))),
        )

    def test_empty_is_no_charges(self):
        self.assertEqual(parse_additional_charges(None), ())
        self.assertEqual(parse_additional_charges([]), ())

    def test_errors_are_keyed_by_index(self):
        with self.assertRaises(PricingInputError) as ctx:
            parse_additional_charges(
                [
                    {"name": "Edge polish", "value": "50"},
                    {"name": "", "value": "abc"},
                    {"name": "Courier", "value": "-3"},
                    "oops",
                ]
            )

        self.assertEqual(
            ctx.exception.errors,
            {
                "additionalPrice[1].name": "name is required",
                "additionalPrice[1].value": "value must be a valid number",
                "additionalPrice[2].value": "value must be non-negative",
                "additionalPrice[3]": "each additional price must be an object with name and value",
            },
        )

    def test_charge_must_fit_a_money_column(self):
        self.assertEqual(
            parse_additional_charges([{"name": "Courier", "value": "9999999999.99"}]),
            (AdditionalCharge("Courier", D("9999999999.99")),),
        )

        with self.assertRaises(PricingInputError) as ctx:
            parse_additional_charges([{"name": "Courier", "value": "1e40"}])

        self.assertEqual(ctx.exception.errors, {"additionalPrice[0].value": "value is too large"})

    def test_not_a_list(self):
        with self.assertRaises(PricingInputError) as ctx:
            parse_additional_charges({"name": "Courier", "value": 1})

        self.assertIn("additionalPrice", ctx.exception.errors)
