# sale_orders/services/pricing.py

"""
SALE ORDER PRICING CALCULATOR

FORMULA:
    subtotal       = base + fitting + tinting + sum(additional charges)
    waived         = (base if free_lens) + (fitting if free_fitting)
    discount_base  = subtotal - waived
    discount       = discount_base * discount_percent / 100
    final_total    = discount_base - discount

GUARANTEES:
- full Decimal precision internally; 2dp ROUND_HALF_UP only via rounded()
- every input non-negative and at most MAX_AMOUNT, discount in [0, 100]
- a zero / negative base price is PriceNotConfiguredError, never "free"
- pure: no lookups, callers resolve prices first (services/sale_order_service.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from sale_orders.services.eye_spec import parse_number
from sale_orders.services.exceptions import PriceNotConfiguredError, PricingInputError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

# largest amount a DecimalField(max_digits=12, decimal_places=2) column holds
MAX_AMOUNT = Decimal("9999999999.99")

EYE_SELECTION_MESSAGE = "At least one eye must be selected"


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any, field_name: str, *, default: Decimal | None = ZERO) -> Decimal:
    """
    Coerce a pricing input to Decimal, raising PricingInputError
    keyed by `field_name` when it is not a number.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if default is None:
            raise PricingInputError({field_name: f"{field_name} is required"})
        return default

    try:
        return parse_number(value)
    except ValueError:
        raise PricingInputError({field_name: f"{field_name} must be a valid number"})


@dataclass(frozen=True)
class AdditionalCharge:
    name: str
    value: Decimal


@dataclass(frozen=True)
class PricingInput:
    base_price: Decimal
    fitting_price: Decimal = ZERO
    tinting_price: Decimal = ZERO
    additional_charges: tuple[AdditionalCharge, ...] = field(default_factory=tuple)
    discount_percent: Decimal = ZERO
    free_lens: bool = False
    free_fitting: bool = False


@dataclass(frozen=True)
class PricingResult:
    subtotal: Decimal
    waived: Decimal
    discount_base: Decimal
    discount_amount: Decimal
    final_total: Decimal

    def rounded(self) -> "PricingResult":
        return PricingResult(
            subtotal=to_money(self.subtotal),
            waived=to_money(self.waived),
            discount_base=to_money(self.discount_base),
            discount_amount=to_money(self.discount_amount),
            final_total=to_money(self.final_total),
        )

    def as_dict(self) -> dict:
        r = self.rounded()
        return {
            "subtotal": str(r.subtotal),
            "waived": str(r.waived),
            "discountBase": str(r.discount_base),
            "discountAmount": str(r.discount_amount),
            "finalTotal": str(r.final_total),
        }


def parse_additional_charges(items: Iterable[Any] | None) -> tuple[AdditionalCharge, ...]:
    """
    [{"name": "Edge polish", "value": "50"}, ...] -> AdditionalCharge tuple.

    Errors are keyed additionalPrice[i].name / additionalPrice[i].value.
    """
    if items in (None, ""):
        return ()

    if not isinstance(items, (list, tuple)):
        raise PricingInputError({"additionalPrice": "additionalPrice must be a list"})

    charges = []
    errors = {}
    for index, item in enumerate(items):
        key = f"additionalPrice[{index}]"

        if not isinstance(item, dict):
            errors[key] = "each additional price must be an object with name and value"
            continue

        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            errors[f"{key}.name"] = "name is required"

        try:
            value = parse_number(item.get("value"))
        except ValueError:
            errors[f"{key}.value"] = "value must be a valid number"
            continue

        if value < 0:
            errors[f"{key}.value"] = "value must be non-negative"
            continue
        if value > MAX_AMOUNT:
            errors[f"{key}.value"] = "value is too large"
            continue

        if isinstance(name, str) and name.strip():
            charges.append(AdditionalCharge(name=name.strip(), value=value))

    if errors:
        raise PricingInputError(errors)
    return tuple(charges)


def base_price_for_eyes(pair_price: Decimal, right_eye: bool, left_eye: bool) -> Decimal:
    """
    Catalog prices are per pair: one eye costs half, both the full price.
    """
    eyes = int(bool(right_eye)) + int(bool(left_eye))
    if eyes == 0:
        raise PricingInputError({"eyeSelection": EYE_SELECTION_MESSAGE})
    if eyes == 1:
        return pair_price / 2
    return pair_price


def calculate_price(pricing_input: PricingInput) -> PricingResult:
    p = pricing_input

    if p.base_price <= 0:
        raise PriceNotConfiguredError(
            "no price configured for this lens/coating combination",
            field="lensPrice",
        )

    errors = {}
    for key, value in (
        ("lensPrice", p.base_price),
        ("fittingPrice", p.fitting_price),
        ("tintingPrice", p.tinting_price),
    ):
        if value < 0:
            errors[key] = f"{key} must be non-negative"
        elif value > MAX_AMOUNT:
            errors[key] = f"{key} is too large"

    for index, charge in enumerate(p.additional_charges):
        if charge.value < 0:
            errors[f"additionalPrice[{index}].value"] = "value must be non-negative"
        elif charge.value > MAX_AMOUNT:
            errors[f"additionalPrice[{index}].value"] = "value is too large"

    if p.discount_percent < 0 or p.discount_percent > HUNDRED:
        errors["discount"] = "Discount must be between 0 and 100"

    if errors:
        raise PricingInputError(errors)

    extras = sum((c.value for c in p.additional_charges), ZERO)
    subtotal = p.base_price + p.fitting_price + p.tinting_price + extras

    waived = ZERO
    if p.free_lens:
        waived += p.base_price
    if p.free_fitting:
        waived += p.fitting_price

    discount_base = subtotal - waived
    discount_amount = discount_base * p.discount_percent / HUNDRED

    return PricingResult(
        subtotal=subtotal,
        waived=waived,
        discount_base=discount_base,
        discount_amount=discount_amount,
        final_total=discount_base - discount_amount,
    )
