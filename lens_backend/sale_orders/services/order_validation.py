# sale_orders/services/order_validation.py

"""
SALE ORDER PAYLOAD VALIDATION

Pure functions of the full camelCase payload:

    validate_sale_order(data, today=...) -> {field: message}

RULES:
- never fail-fast: every offending field is reported in one pass
- first failing rule per field wins
- only fields required by the payload's status are mandatory
  (STATUS_REQUIRED_FIELDS), so a DRAFT needs less than READY_FOR_DISPATCH
- at least one eye selected; active eyes range-checked, inactive ignored
- deliverySchedule not before orderDate
- estimatedDate not in the past whenever it is required

No database access: reference existence is checked by the service.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from sale_orders.models import SaleOrder
from sale_orders.services.eye_spec import (
    EYE_SIDES,
    eye_values,
    is_blank,
    parse_number,
    validate_eye_block,
)
from sale_orders.services.exceptions import PricingInputError
from sale_orders.services.payload import (
    BOOLEAN_FIELDS,
    DISPATCH_FIELDS,
    ID_FIELDS,
    TEXT_LIMITS,
    calendar_date,
    parse_bool,
    parse_date_value,
    parse_datetime_value,
    parse_id,
    parse_uuid,
)
from sale_orders.services.pricing import (
    EYE_SELECTION_MESSAGE,
    MAX_AMOUNT,
    parse_additional_charges,
)

STATUSES = [value for value, _label in SaleOrder.STATUS_CHOICES]
DISPATCH_STATUSES = [value for value, _label in SaleOrder.DISPATCH_STATUS_CHOICES]

BASE_REQUIRED_FIELDS = {
    "customerId": "Customer is required",
    "orderDate": "Order date is required",
    "status": "Status is required",
    "lensId": "Lens is required",
    "categoryId": "Category is required",
    "typeId": "Type is required",
    "diaId": "Dia is required",
    "fittingId": "Fitting is required",
    "coatingId": "Coating is required",
    "tintingId": "Tinting is required",
}

# status -> fields that become mandatory from that status on
STATUS_REQUIRED_FIELDS = {
    SaleOrder.STATUS_READY_FOR_DISPATCH: {
        "dispatchStatus": "Dispatch status is required",
        "estimatedDate": "Estimated date is required",
    },
}

PRICING_REQUIRED_FIELDS = {
    "customerId": "Customer is required",
    "lensId": "Lens is required",
    "coatingId": "Coating is required",
}

MONEY_INPUTS = ("lensPrice", "fittingPrice", "tintingPrice")

DATE_ORDER_MESSAGE = "delivery date cannot be before order date"


# ============================================================
# REQUIRED-FIELD TABLES
# ============================================================


def required_fields_for(data: Mapping[str, Any]) -> dict[str, str]:
    required = dict(BASE_REQUIRED_FIELDS)

    # a waived fitting needs no fitting selection
    if data.get("freeFitting") is True:
        required.pop("fittingId")

    required.update(STATUS_REQUIRED_FIELDS.get(data.get("status"), {}))
    return required


def newly_required_fields(from_status: str, to_status: str) -> dict[str, str]:
    before = STATUS_REQUIRED_FIELDS.get(from_status, {})
    after = STATUS_REQUIRED_FIELDS.get(to_status, {})
    return {key: message for key, message in after.items() if key not in before}


# ============================================================
# RULES (each appends to `errors`, first error per field wins)
# ============================================================


def _add(errors: dict, field: str, message: str):
    errors.setdefault(field, message)


def _check_required(data, required, errors):
    for key, message in required.items():
        if is_blank(data.get(key)):
            _add(errors, key, message)


def _check_status(data, errors):
    value = data.get("status")
    if not is_blank(value) and value not in STATUSES:
        _add(errors, "status", f"Invalid status. Must be one of: {', '.join(STATUSES)}")


def _check_ids(data, errors, keys=ID_FIELDS):
    for key in keys:
        try:
            parse_id(data.get(key))
        except (TypeError, ValueError):
            _add(errors, key, f"{key} must be a valid id")


def _check_flags(data, errors):
    for key in BOOLEAN_FIELDS:
        try:
            parse_bool(data.get(key))
        except ValueError:
            _add(errors, key, f"{key} must be a boolean value")


def _check_eyes(data, errors):
    active = [side for side in EYE_SIDES if data.get(f"{side}Eye") is True]

    if not active:
        _add(errors, "eyeSelection", EYE_SELECTION_MESSAGE)
        return

    for side in active:
        for key, message in validate_eye_block(eye_values(data, side), prefix=side).items():
            _add(errors, key, message)


def _check_dates(data, errors):
    order_date = delivery = None

    try:
        order_date = parse_date_value(data.get("orderDate"))
    except ValueError:
        _add(errors, "orderDate", "Invalid order date format")

    try:
        delivery = parse_datetime_value(data.get("deliverySchedule"))
    except ValueError:
        _add(errors, "deliverySchedule", "Invalid delivery schedule format")

    if order_date and delivery and calendar_date(delivery) < order_date:
        _add(errors, "deliverySchedule", DATE_ORDER_MESSAGE)


def _check_dispatch(data, errors, *, today: date, required: Mapping[str, str]):
    dispatch_status = data.get("dispatchStatus")
    if not is_blank(dispatch_status) and dispatch_status not in DISPATCH_STATUSES:
        _add(
            errors,
            "dispatchStatus",
            f"Invalid dispatch status. Must be one of: {', '.join(DISPATCH_STATUSES)}",
        )

    try:
        estimated = parse_date_value(data.get("estimatedDate"))
    except ValueError:
        _add(errors, "estimatedDate", "Invalid estimated date format")
    else:
        if estimated and "estimatedDate" in required and estimated < today:
            _add(errors, "estimatedDate", "Estimated date cannot be in the past")

    try:
        parse_date_value(data.get("actualDate"))
    except ValueError:
        _add(errors, "actualDate", "Invalid actual date format")

    try:
        parse_uuid(data.get("assignedPersonId"))
    except (AttributeError, TypeError, ValueError):
        _add(errors, "assignedPersonId", "assignedPersonId must be a valid user id")


def _check_text(data, errors, keys=None):
    for key in keys or TEXT_LIMITS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, (bool, dict, list)):
            _add(errors, key, f"{key} must be text")
            continue

        limit = TEXT_LIMITS[key]
        if len(str(value).strip()) > limit:
            _add(errors, key, f"{key} must not exceed {limit} characters")


def _check_pricing(data, errors):
    for key in MONEY_INPUTS:
        value = data.get(key)
        if is_blank(value):
            continue
        try:
            amount = parse_number(value)
        except ValueError:
            _add(errors, key, f"{key} must be a valid number")
            continue
        if amount < 0:
            _add(errors, key, f"{key} must be non-negative")
        elif amount > MAX_AMOUNT:
            _add(errors, key, f"{key} is too large")

    discount = data.get("discount")
    if not is_blank(discount):
        try:
            rate = parse_number(discount)
        except ValueError:
            _add(errors, "discount", "discount must be a valid number")
        else:
            if rate < 0 or rate > Decimal("100"):
                _add(errors, "discount", "Discount must be between 0 and 100")

    try:
        parse_additional_charges(data.get("additionalPrice"))
    except PricingInputError as exc:
        for key, message in exc.errors.items():
            _add(errors, key, message)


# ============================================================
# ENTRY POINTS
# ============================================================


def validate_sale_order(data: Mapping[str, Any], *, today: date) -> dict[str, str]:
    """
    Full-payload validation used by create and update.
    """
    errors: dict[str, str] = {}
    required = required_fields_for(data)

    _check_required(data, required, errors)
    _check_status(data, errors)
    _check_ids(data, errors)
    _check_flags(data, errors)
    _check_eyes(data, errors)
    _check_dates(data, errors)
    _check_dispatch(data, errors, today=today, required=required)
    _check_text(data, errors)
    _check_pricing(data, errors)

    return errors


def validate_status_requirements(
    data: Mapping[str, Any],
    *,
    required: Mapping[str, str],
    today: date,
) -> dict[str, str]:
    """
    Re-check only the fields a status transition newly requires.
    """
    errors: dict[str, str] = {}
    if not required:
        return errors

    _check_required(data, required, errors)
    _check_dispatch(data, errors, today=today, required=required)
    return {key: message for key, message in errors.items() if key in required}


def validate_dispatch_update(
    data: Mapping[str, Any],
    *,
    status: str,
    today: date,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    required = STATUS_REQUIRED_FIELDS.get(status, {})

    _check_required(data, required, errors)
    _check_dispatch(data, errors, today=today, required=required)
    _check_text(data, errors, keys=[key for key in DISPATCH_FIELDS if key in TEXT_LIMITS])
    return errors


def validate_pricing_request(data: Mapping[str, Any]) -> dict[str, str]:
    """
    Minimum needed to price an order (draft or saved).
    """
    errors: dict[str, str] = {}

    _check_required(data, PRICING_REQUIRED_FIELDS, errors)
    _check_ids(data, errors, keys=("customerId", "lensId", "coatingId", "fittingId", "tintingId"))
    _check_flags(data, errors)
    if not any(data.get(f"{side}Eye") is True for side in EYE_SIDES):
        _add(errors, "eyeSelection", EYE_SELECTION_MESSAGE)
    _check_pricing(data, errors)

    return errors
