# masters/services/customer_standing.py

"""
CUSTOMER CREDIT STANDING (CREDIT LIMIT GATE)

Answers: may order entry proceed for this customer?

POLICY:
- Advisory by default: outstanding figures are surfaced, entry proceeds.
- Blocking when allow_exceed_credit_limit is False (per call, or via
  settings.SALE_ORDERS["ALLOW_EXCEED_CREDIT_LIMIT"]): an outstanding balance
  above a configured (positive) credit limit raises CreditLimitExceededError.

A failed lookup never reads as "no credit issue".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError

from masters.models import Customer
from masters.services.exceptions import (
    CreditLimitExceededError,
    RecordNotFoundError,
    UpstreamLookupError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerStanding:
    customer_id: int
    outstanding_credit: Decimal
    credit_limit: Decimal

    @property
    def has_outstanding(self) -> bool:
        return self.outstanding_credit > 0

    @property
    def exceeds_limit(self) -> bool:
        return self.credit_limit > 0 and self.outstanding_credit > self.credit_limit

    def as_dict(self) -> dict:
        return {
            "customerId": self.customer_id,
            "outstandingCredit": str(self.outstanding_credit),
            "creditLimit": str(self.credit_limit),
            "hasOutstanding": self.has_outstanding,
            "exceedsLimit": self.exceeds_limit,
        }


def default_allow_exceed_credit_limit() -> bool:
    conf = getattr(settings, "SALE_ORDERS", {}) or {}
    return bool(conf.get("ALLOW_EXCEED_CREDIT_LIMIT", True))


def get_customer_standing(customer_id) -> CustomerStanding:
    try:
        customer = (
            Customer.objects.filter(pk=customer_id, is_active=True)
            .only("id", "outstanding_credit", "credit_limit")
            .first()
        )
    except DatabaseError as exc:
        logger.exception("Customer standing lookup failed", extra={"customer_id": customer_id})
        raise UpstreamLookupError("Could not determine customer standing") from exc

    if customer is None:
        raise RecordNotFoundError("Customer not found", field="customerId")

    return CustomerStanding(
        customer_id=customer.id,
        outstanding_credit=Decimal(customer.outstanding_credit or 0),
        credit_limit=Decimal(customer.credit_limit or 0),
    )


def check_customer_standing(
    customer_id,
    *,
    allow_exceed_credit_limit: bool | None = None,
) -> CustomerStanding:
    if allow_exceed_credit_limit is None:
        allow_exceed_credit_limit = default_allow_exceed_credit_limit()

    standing = get_customer_standing(customer_id)

    if not standing.exceeds_limit:
        return standing

    if not allow_exceed_credit_limit:
        logger.warning(
            "Order entry blocked by credit limit",
            extra={
                "customer_id": standing.customer_id,
                "outstanding_credit": str(standing.outstanding_credit),
                "credit_limit": str(standing.credit_limit),
            },
        )
        raise CreditLimitExceededError(
            f"Customer outstanding credit {standing.outstanding_credit} "
            f"exceeds credit limit {standing.credit_limit}"
        )

    logger.info(
        "Customer above credit limit (advisory)",
        extra={"customer_id": standing.customer_id},
    )
    return standing
