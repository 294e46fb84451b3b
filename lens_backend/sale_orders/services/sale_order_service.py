# sale_orders/services/sale_order_service.py

"""
SALE ORDER SERVICE (AGGREGATE)

Purpose:
- The only write path for SaleOrder rows.
- Validation, master reference resolution, credit gate, lifecycle and
  pricing are composed here; each lives in its own pure module.

GUARANTEES:
- all-or-nothing: nothing is written unless every check passed
- DELIVERED orders are never edited or deleted
- status changes only through advance_status() (compare-and-set)
- prices are never cached: every calculation re-reads master rows
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from masters.models import (
    Customer,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensProduct,
    LensTinting,
    LensType,
)
from masters.services.customer_standing import (
    check_customer_standing,
    get_customer_standing,
)
from masters.services.price_lookup import (
    get_customer_discount_rate,
    get_fitting_price,
    get_lens_price_record,
    get_tinting_price,
    lookup_lens_coating_price,
)
from sale_orders.models import SaleOrder
from sale_orders.services.eye_spec import is_blank, parse_number
from sale_orders.services.exceptions import (
    OrderLockedError,
    RecordNotFoundError,
    SaleOrderNotFoundError,
    SaleOrderValidationError,
    StaleOrderStatusError,
)
from sale_orders.services.order_lifecycle import is_terminal, validate_transition
from sale_orders.services.order_validation import (
    newly_required_fields,
    validate_dispatch_update,
    validate_pricing_request,
    validate_sale_order,
    validate_status_requirements,
)
from sale_orders.services.payload import (
    DISPATCH_FIELDS,
    clear_inactive_eyes,
    normalize_payload,
    parse_date_value,
    parse_id,
    parse_uuid,
    payload_from_order,
    to_model_values,
)
from sale_orders.services.pricing import (
    MAX_AMOUNT,
    PricingInput,
    PricingResult,
    base_price_for_eyes,
    calculate_price,
    parse_additional_charges,
    to_decimal,
    to_money,
)

logger = logging.getLogger(__name__)

# wire key -> (model, label) for reference resolution
REFERENCES = {
    "customerId": (Customer, "Customer"),
    "lensId": (LensProduct, "Lens"),
    "categoryId": (LensCategory, "Category"),
    "typeId": (LensType, "Type"),
    "diaId": (LensDia, "Dia"),
    "fittingId": (LensFitting, "Fitting"),
    "coatingId": (LensCoating, "Coating"),
    "tintingId": (LensTinting, "Tinting"),
}


# ============================================================
# HELPERS
# ============================================================


def _actor(user):
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return user


def _today():
    return timezone.localdate()


def _resolve_references(data: Mapping[str, Any], keys) -> None:
    """
    Every referenced master row must exist and be active.
    """
    for key in keys:
        if key == "assignedPersonId":
            pk = parse_uuid(data.get(key))
            if pk is not None and not get_user_model().objects.filter(pk=pk, is_active=True).exists():
                raise RecordNotFoundError("Assigned person not found", field=key)
            continue

        pk = parse_id(data.get(key))
        if pk is None or key not in REFERENCES:
            continue

        model, label = REFERENCES[key]
        if not model.objects.filter(pk=pk, is_active=True).exists():
            raise RecordNotFoundError(f"{label} not found", field=key)


def _live_orders():
    return SaleOrder.objects.filter(is_deleted=False)


def _get_order_for_update(order_id) -> SaleOrder:
    order = _live_orders().select_for_update().filter(pk=order_id).first()
    if order is None:
        raise SaleOrderNotFoundError(f"Sale order {order_id} not found")
    return order


# ============================================================
# READS
# ============================================================


def get_sale_order(order_id) -> SaleOrder:
    order = (
        _live_orders()
        .select_related("customer", "lens", "coating", "fitting", "tinting", "assigned_person")
        .filter(pk=order_id)
        .first()
    )
    if order is None:
        raise SaleOrderNotFoundError(f"Sale order {order_id} not found")
    return order


def _date_filter(value, field: str):
    try:
        return parse_date_value(value)
    except ValueError:
        raise SaleOrderValidationError({field: f"Invalid {field} format"})


def list_sale_orders(filters: Mapping[str, Any] | None = None):
    """
    Filters (all optional): status, customerId, dispatchStatus, search,
    startDate / endDate (inclusive, on orderDate).
    """
    filters = filters or {}
    qs = _live_orders().select_related("customer", "lens", "coating")

    status = filters.get("status")
    if status:
        qs = qs.filter(status=status)

    customer_id = filters.get("customerId")
    if customer_id:
        try:
            qs = qs.filter(customer_id=parse_id(customer_id))
        except ValueError:
            raise SaleOrderValidationError({"customerId": "customerId must be a valid id"})

    dispatch_status = filters.get("dispatchStatus")
    if dispatch_status:
        qs = qs.filter(dispatch_status=dispatch_status)

    search = (filters.get("search") or "").strip()
    if search:
        qs = qs.filter(
            Q(order_no__icontains=search)
            | Q(customer_ref_no__icontains=search)
            | Q(item_ref_no__icontains=search)
            | Q(customer__name__icontains=search)
            | Q(customer__code__icontains=search)
        )

    start_date = _date_filter(filters.get("startDate"), "startDate")
    if start_date:
        qs = qs.filter(order_date__gte=start_date)

    end_date = _date_filter(filters.get("endDate"), "endDate")
    if end_date:
        qs = qs.filter(order_date__lte=end_date)

    return qs.order_by("-created_at")


def sale_order_statistics(*, start_date=None, end_date=None) -> dict:
    qs = _live_orders()

    start = _date_filter(start_date, "startDate")
    if start:
        qs = qs.filter(order_date__gte=start)
    end = _date_filter(end_date, "endDate")
    if end:
        qs = qs.filter(order_date__lte=end)

    by_status = {value: 0 for value, _ in SaleOrder.STATUS_CHOICES}
    for row in qs.order_by().values("status").annotate(count=Count("id")):
        by_status[row["status"]] = row["count"]

    by_dispatch = {value: 0 for value, _ in SaleOrder.DISPATCH_STATUS_CHOICES}
    for row in qs.order_by().values("dispatch_status").annotate(count=Count("id")):
        by_dispatch[row["dispatch_status"]] = row["count"]

    revenue = qs.aggregate(total=Sum("lens_price"))["total"] or Decimal("0")

    return {
        "totalOrders": sum(by_status.values()),
        "byStatus": by_status,
        "byDispatchStatus": by_dispatch,
        "totalRevenue": str(to_money(Decimal(revenue))),
    }


# ============================================================
# CREATE / UPDATE
# ============================================================


@transaction.atomic
def create_sale_order(
    *,
    payload: Mapping[str, Any],
    user=None,
    allow_exceed_credit_limit: bool | None = None,
) -> SaleOrder:
    """
    FLOW:
    1) Normalize + full validation (all errors at once)
    2) Resolve master references
    3) Credit gate (advisory unless blocking policy)
    4) Insert with generated order_no
    """

    # --------------------------------------------------
    # 1. VALIDATION
    # --------------------------------------------------
    data = normalize_payload(payload)
    if data.get("status") in (None, ""):
        data["status"] = SaleOrder.STATUS_DRAFT

    errors = validate_sale_order(data, today=_today())
    if "status" not in errors and is_terminal(data["status"]):
        errors["status"] = f"Orders cannot be created as {data['status']}"
    if errors:
        logger.info("Sale order rejected", extra={"error_fields": sorted(errors)})
        raise SaleOrderValidationError(errors)

    clear_inactive_eyes(data)

    # --------------------------------------------------
    # 2. REFERENCES
    # --------------------------------------------------
    _resolve_references(data, [*REFERENCES, "assignedPersonId"])

    # --------------------------------------------------
    # 3. CREDIT GATE
    # --------------------------------------------------
    standing = check_customer_standing(
        parse_id(data["customerId"]),
        allow_exceed_credit_limit=allow_exceed_credit_limit,
    )

    # --------------------------------------------------
    # 4. INSERT
    # --------------------------------------------------
    actor = _actor(user)
    order = SaleOrder(**to_model_values(data), created_by=actor, updated_by=actor)
    order.save()

    order.customer_standing = standing

    logger.info(
        "Sale order created",
        extra={
            "order_id": order.pk,
            "order_no": order.order_no,
            "status": order.status,
            "customer_id": order.customer_id,
        },
    )
    return order


@transaction.atomic
def update_sale_order(
    *,
    order_id,
    payload: Mapping[str, Any],
    user=None,
    allow_exceed_credit_limit: bool | None = None,
) -> SaleOrder:
    """
    Existing values overlaid by the payload, then validated as a whole.

    Status is never changed here (see advance_status).
    """
    order = _get_order_for_update(order_id)

    if order.is_locked:
        raise OrderLockedError(f"Sale order {order.order_no} is {order.status} and cannot be edited")

    incoming = normalize_payload(payload)
    incoming.pop("status", None)

    data = {**payload_from_order(order), **incoming}

    errors = validate_sale_order(data, today=_today())
    if errors:
        logger.info(
            "Sale order update rejected",
            extra={"order_id": order.pk, "error_fields": sorted(errors)},
        )
        raise SaleOrderValidationError(errors)

    clear_inactive_eyes(data)

    # untouched references stay valid even if a master row was retired later
    _resolve_references(data, [key for key in incoming if key in REFERENCES or key == "assignedPersonId"])

    # the credit gate runs on order entry, i.e. when the customer changes
    customer_id = parse_id(data["customerId"])
    if customer_id != order.customer_id:
        standing = check_customer_standing(
            customer_id,
            allow_exceed_credit_limit=allow_exceed_credit_limit,
        )
    else:
        standing = get_customer_standing(customer_id)

    for attr, value in to_model_values(data).items():
        setattr(order, attr, value)
    order.updated_by = _actor(user)
    order.save()

    order.customer_standing = standing

    logger.info(
        "Sale order updated",
        extra={"order_id": order.pk, "fields": sorted(incoming)},
    )
    return order


@transaction.atomic
def update_dispatch_info(*, order_id, payload: Mapping[str, Any], user=None) -> SaleOrder:
    order = _get_order_for_update(order_id)

    if order.is_locked:
        raise OrderLockedError(f"Sale order {order.order_no} is {order.status} and cannot be edited")

    incoming = {key: value for key, value in normalize_payload(payload).items() if key in DISPATCH_FIELDS}
    data = {**payload_from_order(order), **incoming}

    errors = validate_dispatch_update(data, status=order.status, today=_today())
    if errors:
        raise SaleOrderValidationError(errors)

    _resolve_references(data, ["assignedPersonId"] if "assignedPersonId" in incoming else [])

    for attr, value in to_model_values(data, keys=list(incoming)).items():
        setattr(order, attr, value)
    order.updated_by = _actor(user)
    order.save()

    logger.info(
        "Sale order dispatch updated",
        extra={"order_id": order.pk, "dispatch_status": order.dispatch_status},
    )
    return order


# ============================================================
# LIFECYCLE
# ============================================================


def _compare_and_set_status(*, order_id, from_status: str, to_status: str, user=None) -> bool:
    """
    Conditional UPDATE: only the caller that still sees `from_status` wins.
    """
    updated = _live_orders().filter(pk=order_id, status=from_status).update(
        status=to_status,
        updated_by=_actor(user),
        updated_at=timezone.now(),
    )
    return updated == 1


@transaction.atomic
def advance_status(
    *,
    order_id,
    target_status: str,
    user=None,
    expected_current_status: str | None = None,
) -> SaleOrder:
    """
    FLOW:
    1) Stale check against the caller's expected status
    2) Lifecycle validation (forward, single step)
    3) Re-validate fields newly required by the target status
    4) Compare-and-set UPDATE guarded by the current status
    """
    order = get_sale_order(order_id)
    from_status = order.status

    # --------------------------------------------------
    # 1. STALE CHECK
    # --------------------------------------------------
    if expected_current_status and order.status != expected_current_status:
        raise StaleOrderStatusError(
            f"Sale order {order.order_no} is {order.status}, not {expected_current_status}"
        )

    # --------------------------------------------------
    # 2. LIFECYCLE
    # --------------------------------------------------
    validate_transition(order=order, target_status=target_status)

    # --------------------------------------------------
    # 3. NEWLY REQUIRED FIELDS
    # --------------------------------------------------
    required = newly_required_fields(order.status, target_status)
    errors = validate_status_requirements(
        payload_from_order(order),
        required=required,
        today=_today(),
    )
    if errors:
        raise SaleOrderValidationError(errors)

    # --------------------------------------------------
    # 4. COMPARE-AND-SET
    # --------------------------------------------------
    if not _compare_and_set_status(
        order_id=order.pk,
        from_status=from_status,
        to_status=target_status,
        user=user,
    ):
        logger.warning(
            "Sale order status conflict",
            extra={"order_id": order.pk, "from_status": from_status, "to_status": target_status},
        )
        raise StaleOrderStatusError(
            f"Sale order {order.order_no} was changed by another user; reload and retry"
        )

    order.refresh_from_db()

    logger.info(
        "Sale order status advanced",
        extra={"order_id": order.pk, "from_status": from_status, "to_status": target_status},
    )
    return order


@transaction.atomic
def delete_sale_order(*, order_id, user=None) -> None:
    order = _get_order_for_update(order_id)

    if order.is_locked:
        raise OrderLockedError(f"Cannot delete delivered sale order {order.order_no}")

    order.is_deleted = True
    order.updated_by = _actor(user)
    order.save(update_fields=["is_deleted", "updated_by", "updated_at"])

    logger.info("Sale order deleted", extra={"order_id": order.pk})


# ============================================================
# PRICING
# ============================================================


@dataclass(frozen=True)
class OrderPricingQuote:
    result: PricingResult
    price_record_id: int
    pair_price: Decimal
    lens_price: Decimal
    fitting_price: Decimal
    tinting_price: Decimal
    discount_percent: Decimal
    discount_source: str

    def as_dict(self) -> dict:
        return {
            "priceRecordId": self.price_record_id,
            "pairPrice": str(to_money(self.pair_price)),
            "lensPrice": str(to_money(self.lens_price)),
            "fittingPrice": str(to_money(self.fitting_price)),
            "tintingPrice": str(to_money(self.tinting_price)),
            "discount": str(to_money(self.discount_percent)),
            "discountSource": self.discount_source,
            **self.result.as_dict(),
        }


def calculate_order_pricing(
    *,
    order_id=None,
    payload: Mapping[str, Any] | None = None,
) -> OrderPricingQuote:
    """
    Price a saved order (optionally overlaid by `payload`) or a draft payload.

    Discount precedence: the customer's PriceMapping rate for the resolved
    price row, else the order's own discount. Never persists.
    """
    data = payload_from_order(get_sale_order(order_id)) if order_id is not None else {}
    data.update(normalize_payload(payload))

    errors = validate_pricing_request(data)
    if errors:
        raise SaleOrderValidationError(errors)

    customer_id = parse_id(data["customerId"])
    price = lookup_lens_coating_price(
        lens_id=parse_id(data["lensId"]),
        coating_id=parse_id(data["coatingId"]),
    )

    pair_price = Decimal(price.price)
    lens_price = base_price_for_eyes(
        pair_price,
        data.get("rightEye") is True,
        data.get("leftEye") is True,
    )
    fitting_price = get_fitting_price(parse_id(data.get("fittingId")))
    tinting_price = get_tinting_price(parse_id(data.get("tintingId")))

    mapped_rate = get_customer_discount_rate(customer_id=customer_id, lens_price=price)
    if mapped_rate is not None:
        discount, source = mapped_rate, "customer"
    else:
        discount, source = to_decimal(data.get("discount"), "discount"), "order"

    result = calculate_price(
        PricingInput(
            base_price=lens_price,
            fitting_price=fitting_price,
            tinting_price=tinting_price,
            additional_charges=parse_additional_charges(data.get("additionalPrice")),
            discount_percent=discount,
            free_lens=data.get("freeLens") is True,
            free_fitting=data.get("freeFitting") is True,
        )
    )

    logger.debug(
        "Sale order priced",
        extra={"order_id": order_id, "price_record_id": price.pk, "final_total": str(result.final_total)},
    )

    return OrderPricingQuote(
        result=result,
        price_record_id=price.pk,
        pair_price=pair_price,
        lens_price=lens_price,
        fitting_price=fitting_price,
        tinting_price=tinting_price,
        discount_percent=discount,
        discount_source=source,
    )


@dataclass(frozen=True)
class CostQuote:
    quantity: int
    unit_price: Decimal
    unit_fitting_price: Decimal
    discount_rate: Decimal
    has_price_mapping: bool
    lens: PricingResult
    total_fitting_price: Decimal

    @property
    def cost_without_discount(self) -> Decimal:
        return self.lens.subtotal + self.total_fitting_price

    @property
    def cost_with_discount(self) -> Decimal:
        return self.lens.final_total + self.total_fitting_price

    def as_dict(self) -> dict:
        return {
            "quantity": self.quantity,
            "basePrice": str(to_money(self.unit_price)),
            "fittingPrice": str(to_money(self.unit_fitting_price)),
            "hasPriceMapping": self.has_price_mapping,
            "discountRate": str(to_money(self.discount_rate)),
            "discountAmount": str(to_money(self.lens.discount_amount)),
            "lensCostWithoutDiscount": str(to_money(self.lens.subtotal)),
            "lensCostWithDiscount": str(to_money(self.lens.final_total)),
            "totalFittingPrice": str(to_money(self.total_fitting_price)),
            "costWithoutDiscount": str(to_money(self.cost_without_discount)),
            "costWithDiscount": str(to_money(self.cost_with_discount)),
            "finalCost": str(to_money(self.cost_with_discount)),
        }


def calculate_cost(*, customer_id, price_record_id, fitting_id, quantity=1) -> CostQuote:
    """
    Quick quote for `quantity` pairs of one price row plus fitting.

    The customer's mapped discount applies to the lens cost only.
    """
    errors = {}
    parsed = {}
    for key, value in (
        ("customerId", customer_id),
        ("priceRecordId", price_record_id),
        ("fittingId", fitting_id),
    ):
        try:
            parsed[key] = parse_id(value)
        except (TypeError, ValueError):
            errors[key] = f"{key} must be a valid id"
            continue
        if parsed[key] is None:
            errors[key] = f"{key} is required"

    try:
        # parse_number rejects booleans
        number = parse_number(1 if is_blank(quantity) else quantity)
        if number < 1 or number != number.to_integral_value():
            raise ValueError(quantity)
        quantity = int(number)
    except ValueError:
        errors["quantity"] = "quantity must be a positive integer"

    if errors:
        raise SaleOrderValidationError(errors)

    price = get_lens_price_record(parsed["priceRecordId"])
    unit_fitting = get_fitting_price(parsed["fittingId"])
    mapped_rate = get_customer_discount_rate(customer_id=parsed["customerId"], lens_price=price)

    lens_cost = Decimal(price.price) * quantity
    if lens_cost + unit_fitting * quantity > MAX_AMOUNT:
        raise SaleOrderValidationError({"quantity": "quantity is too large"})

    lens = calculate_price(
        PricingInput(
            base_price=lens_cost,
            discount_percent=mapped_rate or Decimal("0"),
        )
    )

    return CostQuote(
        quantity=quantity,
        unit_price=Decimal(price.price),
        unit_fitting_price=unit_fitting,
        discount_rate=mapped_rate or Decimal("0"),
        has_price_mapping=mapped_rate is not None,
        lens=lens,
        total_fitting_price=unit_fitting * quantity,
    )
