from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """One row per (employee, tenant-local date)."""

    attendance_id: int
    employee_id: int
    company_id: int
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    is_late: bool = False
    late_duration_minutes: int = 0
    work_hours: Optional[Decimal] = None
    location_in: Optional[str] = None
    location_out: Optional[str] = None
    device_info: Optional[str] = None
    attendance_type: Optional[str] = None
    note: Optional[str] = None
    leave_id: Optional[int] = None
    is_payroll_processed: bool = False
    payroll_id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceTotals:
    """Compensable days and late minutes of one employee over a date range."""

    total_attendance: int
    total_late_minutes: int


@dataclass(frozen=True)
class StatusSummary:
    """Read-model for dashboards: rows and work hours per status."""

    status: AttendanceStatus
    count: int
    work_hours: Decimal
