from __future__ import annotations

import math

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_number(value, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field_name} must be a finite number")
    return number


def require_in_range(value, field_name: str, low: float, high: float) -> float:
    number = require_number(value, field_name)
    if number < low or number > high:
        raise ValidationError(f"{field_name} must be between {low:g} and {high:g}")
    return number


def require_latitude(value) -> float:
    return require_in_range(value, "latitude", -90.0, 90.0)


def require_longitude(value) -> float:
    return require_in_range(value, "longitude", -180.0, 180.0)
