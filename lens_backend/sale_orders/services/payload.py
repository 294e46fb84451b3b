# sale_orders/services/payload.py

"""
ORDER PAYLOAD MAPPING

The wire format is camelCase (customerId, rightSpherical, estimatedDate...).
This module owns the ONLY mapping between wire keys and SaleOrder attributes:

- normalize_payload()  : drop unknown keys, accept legacy aliases (lens_id, Type_id...)
- payload_from_order() : SaleOrder -> camelCase dict (the merge base for updates)
- to_model_values()    : validated camelCase dict -> typed model attribute values

Parsing helpers raise ValueError; order_validation.py turns those into
field messages before to_model_values() ever runs.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from sale_orders.models import SaleOrder
from sale_orders.services.eye_spec import (
    EYE_DESCRIPTORS,
    EYE_MEASUREMENTS,
    EYE_SIDES,
    field_name,
    is_blank,
    parse_number,
)

# ============================================================
# FIELD MAP (wire key -> model attribute)
# ============================================================

ORDER_INFO_FIELDS = {
    "customerId": "customer_id",
    "customerRefNo": "customer_ref_no",
    "orderDate": "order_date",
    "type": "order_type",
    "deliverySchedule": "delivery_schedule",
    "status": "status",
    "remark": "remark",
    "itemRefNo": "item_ref_no",
    "urgentOrder": "urgent_order",
    "freeLens": "free_lens",
    "freeFitting": "free_fitting",
}

LENS_CONFIG_FIELDS = {
    "lensId": "lens_id",
    "categoryId": "category_id",
    "typeId": "lens_type_id",
    "diaId": "dia_id",
    "fittingId": "fitting_id",
    "coatingId": "coating_id",
    "tintingId": "tinting_id",
}

EYE_BLOCK_ATTRS = [
    ("spherical", "spherical"),
    ("cylindrical", "cylindrical"),
    ("axis", "axis"),
    ("add", "add"),
    ("dia", "dia"),
    ("base", "base"),
    ("baseSize", "base_size"),
    ("bled", "bled"),
]

EYE_FIELDS = {
    "rightEye": "right_eye",
    "leftEye": "left_eye",
    **{
        field_name(side, name): f"{side}_{attr}"
        for side in EYE_SIDES
        for name, attr in EYE_BLOCK_ATTRS
    },
}

DISPATCH_FIELDS = {
    "dispatchStatus": "dispatch_status",
    "assignedPersonId": "assigned_person_id",
    "dispatchId": "dispatch_id",
    "estimatedDate": "estimated_date",
    "estimatedTime": "estimated_time",
    "actualDate": "actual_date",
    "actualTime": "actual_time",
    "dispatchNotes": "dispatch_notes",
}

PRICING_FIELDS = {
    "lensPrice": "lens_price",
    "fittingPrice": "fitting_price",
    "tintingPrice": "tinting_price",
    "discount": "discount",
    "additionalPrice": "additional_price",
}

FIELD_MAP: dict[str, str] = {
    **ORDER_INFO_FIELDS,
    **LENS_CONFIG_FIELDS,
    **EYE_FIELDS,
    **DISPATCH_FIELDS,
    **PRICING_FIELDS,
}

# keys older clients still send
LEGACY_ALIASES = {
    "lens_id": "lensId",
    "category_id": "categoryId",
    "Type_id": "typeId",
    "type_id": "typeId",
    "dia_id": "diaId",
    "fitting_id": "fittingId",
    "coating_id": "coatingId",
    "tinting_id": "tintingId",
    "assignedPerson_id": "assignedPersonId",
}

ID_FIELDS = {"customerId", *LENS_CONFIG_FIELDS}
UUID_FIELDS = {"assignedPersonId"}
BOOLEAN_FIELDS = {"urgentOrder", "freeLens", "freeFitting", "rightEye", "leftEye"}
DATE_FIELDS = {"orderDate", "estimatedDate", "actualDate"}
DATETIME_FIELDS = {"deliverySchedule"}
MEASUREMENT_FIELDS = {
    field_name(side, name) for side in EYE_SIDES for name in EYE_MEASUREMENTS
}
MONEY_FIELDS = {"lensPrice", "fittingPrice", "tintingPrice", "discount"}

TEXT_LIMITS = {
    "customerRefNo": 100,
    "type": 100,
    "remark": 500,
    "itemRefNo": 100,
    "dispatchId": 100,
    "estimatedTime": 20,
    "actualTime": 20,
    "dispatchNotes": 500,
    **{field_name(side, name): 50 for side in EYE_SIDES for name in EYE_DESCRIPTORS},
}

CENT = Decimal("0.01")


# ============================================================
# PARSING HELPERS (raise ValueError)
# ============================================================


def parse_id(value: Any) -> int | None:
    if is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError("boolean is not an id")
    number = int(str(value).strip())
    if number < 1:
        raise ValueError("id must be positive")
    return number


def parse_uuid(value: Any) -> uuid.UUID | None:
    if is_blank(value):
        return None
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value).strip())


def parse_bool(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ValueError("not a boolean")


def parse_date_value(value: Any) -> date | None:
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    parsed = parse_date(text)
    if parsed is None:
        moment = parse_datetime(text)
        if moment is None:
            raise ValueError(f"invalid date: {value!r}")
        parsed = moment.date()
    return parsed


def parse_datetime_value(value: Any) -> datetime | None:
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        moment = parse_datetime(text)
        if moment is None:
            day = parse_date(text)
            if day is None:
                raise ValueError(f"invalid datetime: {value!r}")
            moment = datetime.combine(day, time.min)

    if settings.USE_TZ and timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def calendar_date(moment: datetime) -> date:
    if timezone.is_aware(moment):
        return timezone.localtime(moment).date()
    return moment.date()


def parse_decimal(value: Any) -> Decimal | None:
    if is_blank(value):
        return None
    return parse_number(value).quantize(CENT, rounding=ROUND_HALF_UP)


# ============================================================
# MAPPING
# ============================================================


def normalize_payload(payload: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Keep known wire keys only; read-only keys (id, orderNo, customerName...)
    are silently dropped.
    """
    if not payload:
        return {}

    data = {}
    for key, value in payload.items():
        key = LEGACY_ALIASES.get(key, key)
        if key in FIELD_MAP:
            data[key] = value
    return data


def payload_from_order(order) -> dict[str, Any]:
    data = {}
    for key, attr in FIELD_MAP.items():
        value = getattr(order, attr)
        if key == "additionalPrice":
            value = [dict(item) for item in (value or [])]
        data[key] = value
    return data


def clear_inactive_eyes(data: dict[str, Any]) -> dict[str, Any]:
    """
    A deselected eye carries no values (its block is cleared, not kept stale).
    """
    for side in EYE_SIDES:
        if data.get(f"{side}Eye") is True:
            continue
        for name in (*EYE_MEASUREMENTS, *EYE_DESCRIPTORS):
            data[field_name(side, name)] = None
    return data


def to_model_values(data: Mapping[str, Any], *, keys=None) -> dict[str, Any]:
    """
    Convert a validated camelCase payload into SaleOrder attribute values.

    `keys` limits the conversion (e.g. dispatch-only updates).
    """
    values = {}
    for key in keys or data.keys():
        if key not in FIELD_MAP or key not in data:
            continue

        raw = data[key]
        attr = FIELD_MAP[key]

        if key in ID_FIELDS:
            value = parse_id(raw)
        elif key in UUID_FIELDS:
            value = parse_uuid(raw)
        elif key in BOOLEAN_FIELDS:
            value = parse_bool(raw)
        elif key in DATE_FIELDS:
            value = parse_date_value(raw)
        elif key in DATETIME_FIELDS:
            value = parse_datetime_value(raw)
        elif key in MEASUREMENT_FIELDS:
            value = parse_decimal(raw)
        elif key in MONEY_FIELDS:
            value = parse_decimal(raw) or Decimal("0.00")
        elif key == "additionalPrice":
            value = [
                {
                    "name": str(item["name"]).strip(),
                    "value": str(parse_decimal(item["value"])),
                }
                for item in (raw or [])
            ]
        elif key == "dispatchStatus":
            value = SaleOrder.DISPATCH_PENDING if is_blank(raw) else str(raw).strip()
        else:
            value = "" if raw is None else str(raw).strip()

        values[attr] = value

    return values
