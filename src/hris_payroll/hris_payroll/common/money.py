from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ..core.constants import HOURS_PLACES, MONEY_PLACES


def to_money(value: Any) -> Decimal:
    """Quantize a monetary value to 2 decimals."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def hours_between(start, end) -> Decimal:
    """Elapsed hours between two datetimes, rounded to 2 decimals."""
    seconds = Decimal(int((end - start).total_seconds()))
    return (seconds / Decimal(3600)).quantize(HOURS_PLACES, rounding=ROUND_HALF_UP)
