from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.hris_payroll.hris_payroll.core.enums import AttendanceStatus, EmployeeStatus, SubscriptionStatus
from src.hris_payroll.hris_payroll.core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AuthorizationError,
    ConflictingLeaveStatus,
    NoClockInFound,
    NonWorkingDay,
    OutOfRange,
    PayrollLocked,
    SubscriptionExpired,
    ValidationError,
)
from tests.fakes import OFFICE_LAT, OFFICE_LON, World

MONDAY = date(2025, 3, 3)
AT_OFFICE = (OFFICE_LAT, OFFICE_LON)


def _north_of_office(meters: float) -> tuple[float, float]:
    return OFFICE_LAT + math.degrees(meters / 6_371_000), OFFICE_LON


def _clock(world: World, kind: str, at: datetime, coordinates=AT_OFFICE):
    world.clock.now = at
    return world.services.attendance_service.record_clock_event(world.EMPLOYEE_ID, kind, coordinates=coordinates)


def test_clock_in_exactly_at_work_start_is_on_time(world):
    record = _clock(world, "In", datetime(2025, 3, 3, 8, 0, 0))

    assert record.status == AttendanceStatus.ON_TIME
    assert record.is_late is False
    assert record.late_duration_minutes == 0
    assert record.work_date == MONDAY
    assert record.location_in == "-6.200000,106.816666"


def test_clock_in_one_second_late_counts_one_minute(world):
    record = _clock(world, "In", datetime(2025, 3, 3, 8, 0, 1))

    assert record.status == AttendanceStatus.LATE
    assert record.is_late is True
    assert record.late_duration_minutes == 1


def test_late_minutes_are_whole_minutes(world):
    record = _clock(world, "In", datetime(2025, 3, 3, 8, 30, 59))

    assert record.late_duration_minutes == 30


def test_clock_in_outside_radius_is_rejected(world):
    with pytest.raises(OutOfRange) as exc:
        _clock(world, "In", datetime(2025, 3, 3, 7, 50), coordinates=_north_of_office(150))

    assert exc.value.distance_m == pytest.approx(150, abs=0.5)
    assert exc.value.radius_m == 100
    assert "150 m" in str(exc.value)
    assert world.store.attendance == {}


def test_clock_in_inside_radius_is_accepted(world):
    record = _clock(world, "In", datetime(2025, 3, 3, 7, 50), coordinates=_north_of_office(99))

    assert record.status == AttendanceStatus.ON_TIME


def test_missing_location_is_rejected_when_office_has_geofence(world):
    with pytest.raises(ValidationError):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50), coordinates=None)


def test_missing_location_is_fine_without_geofence():
    world = World()
    world.add_company(World.COMPANY_ID, geofence=False)

    record = _clock(world, "In", datetime(2025, 3, 3, 7, 50), coordinates=None)

    assert record.location_in is None


def test_unknown_clock_type_is_rejected(world):
    with pytest.raises(ValidationError):
        _clock(world, "Break", datetime(2025, 3, 3, 7, 50))


def test_second_clock_in_is_rejected(world):
    _clock(world, "In", datetime(2025, 3, 3, 7, 50))

    with pytest.raises(AlreadyClockedIn):
        _clock(world, "In", datetime(2025, 3, 3, 7, 55))


def test_clock_in_on_payroll_locked_day_is_rejected(world):
    world.add_attendance(work_date=MONDAY, status=AttendanceStatus.ABSENT, locked=True, payroll_id=9)

    with pytest.raises(PayrollLocked):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_clock_in_on_approved_leave_day_is_rejected(world):
    world.add_attendance(work_date=MONDAY, status=AttendanceStatus.SICK)

    with pytest.raises(ConflictingLeaveStatus):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_clock_in_fills_an_absent_row(world):
    absent = world.add_attendance(work_date=MONDAY, status=AttendanceStatus.ABSENT)

    record = _clock(world, "In", datetime(2025, 3, 3, 8, 10))

    assert record.attendance_id == absent.attendance_id
    assert record.status == AttendanceStatus.LATE
    assert record.late_duration_minutes == 10


def test_clock_in_on_weekend_is_rejected(world):
    with pytest.raises(NonWorkingDay) as exc:
        _clock(world, "In", datetime(2025, 3, 8, 8, 0))

    assert "Saturday" in str(exc.value)


def test_clock_in_on_holiday_is_rejected(world):
    world.add_holiday(MONDAY, "Nyepi")

    with pytest.raises(NonWorkingDay) as exc:
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))

    assert "Nyepi" in str(exc.value)


def test_inactive_employee_cannot_clock(world):
    world.add_employee(World.EMPLOYEE_ID, status=EmployeeStatus.INACTIVE)

    with pytest.raises(AuthorizationError):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_expired_subscription_blocks_clocking(world):
    world.add_company(World.COMPANY_ID, subscription=SubscriptionStatus.EXPIRED)

    with pytest.raises(SubscriptionExpired):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_subscription_past_end_date_blocks_clocking(world):
    world.add_company(World.COMPANY_ID, end_date=datetime(2020, 1, 1))

    with pytest.raises(SubscriptionExpired):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_utc_timestamp_is_bucketed_on_the_tenant_local_date(world):
    # 23:30 UTC on Sunday is 06:30 on Monday in Jakarta.
    world.clock.now = datetime(2025, 3, 2, 23, 30, tzinfo=timezone.utc)

    record = world.services.attendance_service.record_clock_event(world.EMPLOYEE_ID, "In", coordinates=AT_OFFICE)

    assert record.work_date == MONDAY
    assert record.clock_in == datetime(2025, 3, 3, 6, 30)
    assert record.status == AttendanceStatus.ON_TIME


def test_lost_clock_in_race_reports_the_winning_state(world, monkeypatch):
    def leave_wins(**kwargs):
        world.add_attendance(work_date=kwargs["work_date"], status=AttendanceStatus.ANNUAL_LEAVE)
        return False

    monkeypatch.setattr(world.attendance, "claim_clock_in", leave_wins)

    with pytest.raises(ConflictingLeaveStatus):
        _clock(world, "In", datetime(2025, 3, 3, 7, 50))


def test_clock_out_without_clock_in_is_rejected(world):
    with pytest.raises(NoClockInFound):
        _clock(world, "Out", datetime(2025, 3, 3, 17, 0))


def test_clock_out_records_work_hours(world):
    _clock(world, "In", datetime(2025, 3, 3, 8, 0))

    record = _clock(world, "Out", datetime(2025, 3, 3, 17, 15))

    assert record.clock_out == datetime(2025, 3, 3, 17, 15)
    assert record.work_hours == Decimal("9.25")
    assert record.location_out == "-6.200000,106.816666"


def test_second_clock_out_is_rejected(world):
    _clock(world, "In", datetime(2025, 3, 3, 8, 0))
    _clock(world, "Out", datetime(2025, 3, 3, 17, 0))

    with pytest.raises(AlreadyClockedOut):
        _clock(world, "Out", datetime(2025, 3, 3, 17, 5))


def test_clock_out_outside_radius_is_rejected(world):
    _clock(world, "In", datetime(2025, 3, 3, 8, 0))

    with pytest.raises(OutOfRange):
        _clock(world, "Out", datetime(2025, 3, 3, 17, 0), coordinates=_north_of_office(500))

    assert world.services.attendance_service.get_today(world.EMPLOYEE_ID).clock_out is None


def test_history_is_newest_first(world):
    for offset in range(3):
        world.add_attendance(work_date=MONDAY - timedelta(days=offset))

    history = world.services.attendance_service.get_history(world.EMPLOYEE_ID, limit=2)

    assert [r.work_date for r in history] == [MONDAY, MONDAY - timedelta(days=1)]


def test_clock_out_on_locked_row_leaves_it_untouched(world):
    record = _clock(world, "In", datetime(2025, 3, 3, 8, 0))
    world.attendance.lock_range(employee_id=world.EMPLOYEE_ID, start=MONDAY, end=MONDAY, payroll_id=12)

    with pytest.raises(PayrollLocked):
        _clock(world, "Out", datetime(2025, 3, 3, 17, 0))

    after = world.attendance.get_by_id(record.attendance_id)
    assert after.clock_out is None
    assert after.work_hours is None
