from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_decimal(value, field_name: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    # NaN and Infinity parse fine but cannot be compared or stored.
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number")
    return number


def require_positive(value, field_name: str) -> Decimal:
    number = require_decimal(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return number


def require_non_negative(value, field_name: str) -> Decimal:
    number = require_decimal(value, field_name)
    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number
