from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceTotals, StatusSummary


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_company(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def claim_clock_in(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus,
        is_late: bool,
        late_minutes: int,
        location: Optional[str],
        device_info: Optional[str],
    ) -> bool:
        """Insert-or-fill the day's row with a clock-in.

        Returns False (and writes nothing) when the row already has a clock-in,
        is payroll-locked or carries a leave status.
        """

        raise NotImplementedError

    def record_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        work_hours: Decimal,
        location: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def upsert_leave_day(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        status: AttendanceStatus,
        leave_id: int,
    ) -> None:
        raise NotImplementedError

    def correct(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        is_late: bool,
        late_minutes: int,
        work_hours: Optional[Decimal],
        note: str,
    ) -> bool:
        """Manual update; returns False if the row is payroll-locked."""

        raise NotImplementedError

    def find_locked_dates(self, *, employee_id: int, days: Sequence[date]) -> list[date]:
        raise NotImplementedError

    def totals_for_payroll(self, *, employee_id: int, start: date, end: date) -> AttendanceTotals:
        raise NotImplementedError

    def lock_range(self, *, employee_id: int, start: date, end: date, payroll_id: int) -> int:
        raise NotImplementedError

    def unlock_for_payroll(self, payroll_id: int) -> int:
        raise NotImplementedError

    def summarize_by_status(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[StatusSummary]:
        raise NotImplementedError
