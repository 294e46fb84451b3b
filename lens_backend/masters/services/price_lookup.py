# masters/services/price_lookup.py

"""
PRICE LOOKUP SERVICE

Read-only resolution of the figures the sale-order pricing flow needs:
- lens pair price for a (lens, coating) combination
- fitting / tinting service prices
- customer-specific discount rate (PriceMapping)

RULES:
- Never cached: every call re-reads the current row.
- A missing price row is PriceNotConfiguredError, never a zero price.
- Database failures surface as UpstreamLookupError.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.db import DatabaseError

from masters.models import (
    Customer,
    LensFitting,
    LensPrice,
    LensTinting,
    PriceMapping,
)
from masters.services.exceptions import (
    PriceNotConfiguredError,
    RecordNotFoundError,
    UpstreamLookupError,
)

logger = logging.getLogger(__name__)


def lookup_lens_coating_price(*, lens_id, coating_id) -> LensPrice:
    try:
        price = (
            LensPrice.objects.select_related("lens", "coating")
            .filter(
                lens_id=lens_id,
                coating_id=coating_id,
                is_active=True,
                lens__is_active=True,
                coating__is_active=True,
            )
            .first()
        )
    except DatabaseError as exc:
        logger.exception(
            "Lens price lookup failed",
            extra={"lens_id": lens_id, "coating_id": coating_id},
        )
        raise UpstreamLookupError("Could not look up lens price") from exc

    if price is None:
        logger.warning(
            "No price configured",
            extra={"lens_id": lens_id, "coating_id": coating_id},
        )
        raise PriceNotConfiguredError(
            "no price configured for this lens/coating combination",
            field="coatingId",
        )

    return price


def get_lens_price_record(price_record_id) -> LensPrice:
    try:
        price = (
            LensPrice.objects.select_related("lens", "coating")
            .filter(pk=price_record_id, is_active=True)
            .first()
        )
    except DatabaseError as exc:
        raise UpstreamLookupError("Could not look up lens price") from exc

    if price is None:
        raise PriceNotConfiguredError("Lens price not found", field="priceRecordId")
    return price


def get_fitting_price(fitting_id) -> Decimal:
    if fitting_id in (None, ""):
        return Decimal("0")

    try:
        fitting = LensFitting.objects.filter(pk=fitting_id, is_active=True).first()
    except DatabaseError as exc:
        raise UpstreamLookupError("Could not look up fitting") from exc

    if fitting is None:
        raise RecordNotFoundError("Fitting not found", field="fittingId")
    return Decimal(fitting.fitting_price or 0)


def get_tinting_price(tinting_id) -> Decimal:
    if tinting_id in (None, ""):
        return Decimal("0")

    try:
        tinting = LensTinting.objects.filter(pk=tinting_id, is_active=True).first()
    except DatabaseError as exc:
        raise UpstreamLookupError("Could not look up tinting") from exc

    if tinting is None:
        raise RecordNotFoundError("Tinting not found", field="tintingId")
    return Decimal(tinting.tinting_price or 0)


def get_customer_discount_rate(*, customer_id, lens_price: LensPrice) -> Decimal | None:
    """
    Discount rate mapped for this customer on this price row,
    or None when the customer has no mapping.
    """
    try:
        if not Customer.objects.filter(pk=customer_id, is_active=True).exists():
            raise RecordNotFoundError("Customer not found", field="customerId")

        mapping = (
            PriceMapping.objects.filter(customer_id=customer_id, lens_price=lens_price)
            .only("discount_rate")
            .first()
        )
    except DatabaseError as exc:
        raise UpstreamLookupError("Could not look up customer discount") from exc

    if mapping is None:
        return None
    return Decimal(mapping.discount_rate)
