from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from src.hris_payroll.hris_payroll.core.enums import AttendanceStatus
from src.hris_payroll.hris_payroll.core.exceptions import ValidationError


def test_attendance_summary_counts_every_status(world):
    world.add_attendance(work_date=date(2025, 3, 3), work_hours="8.00")
    world.add_attendance(work_date=date(2025, 3, 4), status=AttendanceStatus.LATE, late_minutes=5, work_hours="7.50")
    world.add_attendance(work_date=date(2025, 3, 5), status=AttendanceStatus.SICK)

    summary = world.services.reporting_service.attendance_summary(
        company_id=world.COMPANY_ID, start=date(2025, 3, 1), end=date(2025, 3, 31)
    )

    assert summary.counts["OnTime"] == 1
    assert summary.counts["Late"] == 1
    assert summary.counts["Sick"] == 1
    assert summary.counts["Absent"] == 0
    assert summary.total_work_hours == Decimal("15.50")


def test_attendance_summary_rejects_reversed_range(world):
    with pytest.raises(ValidationError):
        world.services.reporting_service.attendance_summary(
            company_id=world.COMPANY_ID, start=date(2025, 3, 31), end=date(2025, 3, 1)
        )


def test_payroll_summary_totals(world):
    world.add_employee(6)
    world.services.payroll_service.generate_payroll_period(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=3, year=2025
    )
    first = min(world.store.payrolls)
    world.services.payroll_service.calculate_payroll(actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, payroll_id=first)

    summary = world.services.reporting_service.payroll_summary(company_id=world.COMPANY_ID, month=3, year=2025)

    assert summary.total_count == 2
    assert summary.total_net == Decimal("5000000.00")
    assert [s.status.value for s in summary.by_status] == ["Draft", "Review"]


def test_employee_dashboard(world):
    for day in (3, 4, 5, 6, 7, 10):
        world.add_attendance(work_date=date(2025, 3, day), work_hours="8.00")
    world.add_employee(world.EMPLOYEE_ID, quota=12, balance=9)

    dashboard = world.services.reporting_service.employee_dashboard(world.EMPLOYEE_ID, date(2025, 3, 10))

    assert (dashboard.month, dashboard.year) == (3, 2025)
    assert dashboard.status_counts["OnTime"] == 6
    assert dashboard.total_work_hours == Decimal("48.00")
    assert (dashboard.leave.total_quota, dashboard.leave.taken, dashboard.leave.remaining) == (12, 3, 9)
    assert [d["date"] for d in dashboard.recent_days] == [
        "2025-03-04",
        "2025-03-05",
        "2025-03-06",
        "2025-03-07",
        "2025-03-10",
    ]


def test_payroll_csv(world):
    world.services.payroll_service.generate_payroll_period(
        actor_id=world.ADMIN_ID, company_id=world.COMPANY_ID, month=3, year=2025
    )

    text = world.services.reporting_service.payroll_csv(company_id=world.COMPANY_ID, month=3, year=2025)

    [row] = list(csv.DictReader(io.StringIO(text)))
    assert row["full_name"] == "Budi Santoso"
    assert row["basic_salary"] == "5000000"
    assert row["status"] == "Draft"
    assert row["paid_at"] == ""
