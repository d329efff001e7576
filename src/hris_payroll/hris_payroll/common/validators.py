from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .money import to_money


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return number


def require_period(month: Any, year: Any) -> tuple[int, int]:
    m = require_positive_int(month, "Month")
    y = require_positive_int(year, "Year")
    if m > 12:
        raise ValidationError("Month must be between 1 and 12")
    if y < 1970:
        raise ValidationError("Year is out of range")
    return m, y


def require_non_negative_money(value: Any, field_name: str) -> Decimal:
    try:
        amount = to_money(value if value not in (None, "") else 0)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return amount


def require_coordinates(latitude: Any, longitude: Any) -> tuple[float, float]:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError):
        raise ValidationError("Latitude and longitude are required")
    if not -90 <= lat <= 90:
        raise ValidationError("Latitude must be between -90 and 90")
    if not -180 <= lon <= 180:
        raise ValidationError("Longitude must be between -180 and 180")
    return lat, lon
