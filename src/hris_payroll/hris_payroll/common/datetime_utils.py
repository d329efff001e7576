from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

import pytz

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` work-start setting into a time."""
    try:
        return datetime.strptime((value or "").strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r} (expected HH:MM)")


def get_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValidationError(f"Unknown timezone {name!r}")


def now_local(tz_name: str) -> datetime:
    """Current wall-clock time in the tenant timezone (naive).

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(get_timezone(tz_name)).replace(tzinfo=None)


def to_local(value: Optional[datetime], tz_name: str) -> datetime:
    """Convert a timestamp to naive tenant-local wall-clock time.

    Naive input is taken to already be tenant-local; aware input is converted.
    """
    if value is None:
        return now_local(tz_name)
    if value.tzinfo is None:
        return value
    return value.astimezone(get_timezone(tz_name)).replace(tzinfo=None)


def today_local(tz_name: str) -> date:
    return now_local(tz_name).date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time(23, 59, 59))


def month_range(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def is_weekend(day: date) -> bool:
    # Monday=0 ... Saturday=5, Sunday=6
    return day.weekday() >= 5
