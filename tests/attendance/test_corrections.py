from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest

from src.hris_payroll.hris_payroll.core.constants import MANUAL_ATTENDANCE_TYPE
from src.hris_payroll.hris_payroll.core.enums import AttendanceStatus
from src.hris_payroll.hris_payroll.core.exceptions import (
    NotFoundError,
    PayrollLocked,
    ReasonRequired,
    ValidationError,
)
from tests.fakes import World

MONDAY = date(2025, 3, 3)


def _late_row(world: World):
    return world.add_attendance(
        work_date=MONDAY,
        status=AttendanceStatus.LATE,
        clock_in=datetime(2025, 3, 3, 8, 20),
        clock_out=datetime(2025, 3, 3, 17, 0),
        late_minutes=20,
        work_hours="8.67",
    )


def _correct(world: World, attendance_id: int, **kwargs):
    kwargs.setdefault("reason", "Traffic accident on the toll road")
    return world.services.attendance_service.correct_attendance(
        actor_id=world.ADMIN_ID,
        company_id=world.COMPANY_ID,
        attendance_id=attendance_id,
        **kwargs,
    )


def test_correction_to_on_time_clears_lateness_and_is_audited(world):
    row = _late_row(world)

    record = _correct(world, row.attendance_id, status="OnTime")

    assert record.status == AttendanceStatus.ON_TIME
    assert record.is_late is False
    assert record.late_duration_minutes == 0
    assert record.note == "Traffic accident on the toll road"
    assert record.attendance_type == MANUAL_ATTENDANCE_TYPE

    [event] = world.audit.events
    assert event.action == "ATTENDANCE_CORRECTED"
    assert event.actor_id == world.ADMIN_ID
    assert event.target == f"attendance:{row.attendance_id}"
    assert event.details["old_status"] == "Late"
    assert event.details["new_status"] == "OnTime"
    assert event.details["reason"] == "Traffic accident on the toll road"


def test_correction_with_new_clock_in_recomputes_lateness_and_hours(world):
    row = _late_row(world)

    record = _correct(world, row.attendance_id, status="Late", clock_in=time(8, 45))

    assert record.clock_in == datetime(2025, 3, 3, 8, 45)
    assert record.late_duration_minutes == 45
    assert record.work_hours == Decimal("8.25")


def test_correction_requires_a_reason(world):
    row = _late_row(world)

    with pytest.raises(ReasonRequired):
        _correct(world, row.attendance_id, status="OnTime", reason="   ")

    assert world.attendance.get_by_id(row.attendance_id).status == AttendanceStatus.LATE
    assert world.audit.events == []


def test_locked_row_cannot_be_corrected(world):
    row = world.add_attendance(work_date=MONDAY, status=AttendanceStatus.ABSENT, locked=True, payroll_id=4)

    with pytest.raises(PayrollLocked):
        _correct(world, row.attendance_id, status="OnTime")


def test_locked_check_comes_before_reason_check(world):
    row = world.add_attendance(work_date=MONDAY, locked=True, payroll_id=4)

    with pytest.raises(PayrollLocked):
        _correct(world, row.attendance_id, status="OnTime", reason="")


def test_clock_out_before_clock_in_is_rejected(world):
    row = _late_row(world)

    with pytest.raises(ValidationError):
        _correct(world, row.attendance_id, status="Late", clock_out=time(7, 0))


def test_unknown_status_is_rejected(world):
    row = _late_row(world)

    with pytest.raises(ValidationError):
        _correct(world, row.attendance_id, status="Holiday")


def test_other_tenant_row_is_not_found(world):
    world.add_company(2)
    world.add_employee(30, company_id=2)
    row = world.add_attendance(work_date=MONDAY, employee_id=30, company_id=2)

    with pytest.raises(NotFoundError):
        _correct(world, row.attendance_id, status="Absent")


def test_bulk_correction_updates_every_row(world):
    ids = [
        world.add_attendance(work_date=date(2025, 3, day), status=AttendanceStatus.ABSENT).attendance_id
        for day in (3, 4, 5)
    ]

    count = world.services.attendance_service.bulk_correct_status(
        actor_id=world.ADMIN_ID,
        company_id=world.COMPANY_ID,
        attendance_ids=ids,
        status="OnTime",
        reason="Badge reader outage",
    )

    assert count == 3
    assert {world.attendance.get_by_id(i).status for i in ids} == {AttendanceStatus.ON_TIME}
    assert len(world.audit.events) == 3


def test_bulk_correction_is_all_or_nothing(world):
    free = world.add_attendance(work_date=date(2025, 3, 3), status=AttendanceStatus.ABSENT)
    locked = world.add_attendance(work_date=date(2025, 3, 4), status=AttendanceStatus.ABSENT, locked=True, payroll_id=7)

    with pytest.raises(PayrollLocked):
        world.services.attendance_service.bulk_correct_status(
            actor_id=world.ADMIN_ID,
            company_id=world.COMPANY_ID,
            attendance_ids=[free.attendance_id, locked.attendance_id],
            status="OnTime",
            reason="Badge reader outage",
        )

    assert world.attendance.get_by_id(free.attendance_id).status == AttendanceStatus.ABSENT
    assert world.conn.rollbacks == 1
    assert world.audit.events == []


def test_failed_audit_write_does_not_undo_the_correction(world):
    row = _late_row(world)
    world.audit.fail = True

    record = _correct(world, row.attendance_id, status="OnTime")

    assert record.status == AttendanceStatus.ON_TIME
