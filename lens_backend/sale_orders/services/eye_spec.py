# sale_orders/services/eye_spec.py

"""
EYE PRESCRIPTION VALIDATION

One eye block = spherical, cylindrical, axis, add (numeric, range-checked)
plus descriptive dia / base / baseSize / bled (free text).

RULES:
- all four numeric values are required for an active eye
- each must parse as a finite number
- each must lie inside its closed range (bounds inclusive)
- at most one error per field, first failing rule wins

Pure: no database access, no side effects.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

EYE_SIDES = ("right", "left")

EYE_MEASUREMENTS = ("spherical", "cylindrical", "axis", "add")
EYE_DESCRIPTORS = ("dia", "base", "baseSize", "bled")

EYE_SPEC_RANGES: dict[str, tuple[Decimal, Decimal]] = {
    "spherical": (Decimal("-20.0"), Decimal("20.0")),
    "cylindrical": (Decimal("-6.0"), Decimal("6.0")),
    "axis": (Decimal("0"), Decimal("180")),
    "add": (Decimal("0.0"), Decimal("4.0")),
}

MSG_REQUIRED = "required"
MSG_NOT_A_NUMBER = "must be a valid number"


def _out_of_range(low: Decimal, high: Decimal) -> str:
    return f"out of range: expected [{low}, {high}]"


def parse_number(value: Any) -> Decimal:
    """
    Parse a user-supplied number (int, float, Decimal or numeric string).

    Raises ValueError on anything else, including NaN / Infinity and booleans.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")

    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"not a number: {value!r}") from exc

    if not number.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return number


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def field_name(prefix: str, name: str) -> str:
    """field_name("right", "baseSize") -> "rightBaseSize"."""
    if not prefix:
        return name
    return f"{prefix}{name[0].upper()}{name[1:]}"


def eye_values(payload: Mapping[str, Any], side: str) -> dict[str, Any]:
    """Pull one eye's numeric values out of a camelCase order payload."""
    return {name: payload.get(field_name(side, name)) for name in EYE_MEASUREMENTS}


def validate_eye_block(
    values: Mapping[str, Any],
    ranges: Mapping[str, tuple[Decimal, Decimal]] = EYE_SPEC_RANGES,
    *,
    prefix: str = "",
) -> dict[str, str]:
    errors: dict[str, str] = {}

    for name, (low, high) in ranges.items():
        key = field_name(prefix, name)
        raw = values.get(name)

        if is_blank(raw):
            errors[key] = MSG_REQUIRED
            continue

        try:
            number = parse_number(raw)
        except ValueError:
            errors[key] = MSG_NOT_A_NUMBER
            continue

        if number < low or number > high:
            errors[key] = _out_of_range(low, high)

    return errors
