from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest
import pytz

from src.hris_payroll.hris_payroll.common.datetime_utils import (
    get_timezone,
    is_weekend,
    month_range,
    parse_hhmm,
    parse_iso_date,
    to_local,
)
from src.hris_payroll.hris_payroll.common.geo import haversine_m
from src.hris_payroll.hris_payroll.common.money import hours_between, to_money
from src.hris_payroll.hris_payroll.common.validators import (
    require_coordinates,
    require_non_negative_money,
    require_period,
)
from src.hris_payroll.hris_payroll.core.exceptions import ValidationError


def test_haversine_one_degree_of_latitude():
    assert haversine_m(0, 0, 1, 0) == pytest.approx(111_195, abs=1)


def test_haversine_same_point_is_zero():
    assert haversine_m(-6.2, 106.8, -6.2, 106.8) == 0


def test_to_money_rounds_half_up():
    assert to_money("10.005") == Decimal("10.01")
    assert to_money(0.1) == Decimal("0.10")


def test_hours_between():
    assert hours_between(datetime(2025, 1, 6, 8, 0), datetime(2025, 1, 6, 16, 20)) == Decimal("8.33")


def test_to_local_converts_aware_timestamps():
    utc = datetime(2025, 1, 6, 1, 0, tzinfo=pytz.utc)

    assert to_local(utc, "Asia/Jakarta") == datetime(2025, 1, 6, 8, 0)
    assert to_local(datetime(2025, 1, 6, 8, 0), "Asia/Jakarta") == datetime(2025, 1, 6, 8, 0)


def test_unknown_timezone_is_a_validation_error():
    with pytest.raises(ValidationError):
        get_timezone("Mars/Olympus")


def test_parsers():
    assert parse_iso_date("2025-02-28") == date(2025, 2, 28)
    assert parse_hhmm("08:30") == time(8, 30)
    with pytest.raises(ValidationError):
        parse_iso_date("28/02/2025")
    with pytest.raises(ValidationError):
        parse_hhmm("8am")


def test_month_range_handles_leap_years():
    assert month_range(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))


def test_is_weekend():
    assert is_weekend(date(2025, 3, 8))
    assert is_weekend(date(2025, 3, 9))
    assert not is_weekend(date(2025, 3, 10))


def test_validators():
    assert require_period("3", 2025) == (3, 2025)
    with pytest.raises(ValidationError):
        require_period(0, 2025)
    assert require_non_negative_money("", "Allowance") == Decimal("0.00")
    with pytest.raises(ValidationError):
        require_non_negative_money("-1", "Base salary")
    with pytest.raises(ValidationError):
        require_non_negative_money("abc", "Base salary")
    with pytest.raises(ValidationError):
        require_coordinates(91, 0)
