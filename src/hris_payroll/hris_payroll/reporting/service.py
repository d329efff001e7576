from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_range
from ..common.validators import require_period
from ..core.enums import AttendanceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..payroll.repository import PayrollRepository
from .model import AttendanceSummary, EmployeeDashboard, LeaveSummary, PayrollSummary

PAYROLL_CSV_FIELDS = [
    "payroll_id",
    "employee_id",
    "full_name",
    "month",
    "year",
    "basic_salary",
    "allowances",
    "total_attendance",
    "total_late_minutes",
    "deductions",
    "net_salary",
    "status",
    "paid_at",
]


class ReportingService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        *,
        recent_days: int = 5,
    ):
        self._attendance = attendance
        self._payrolls = payrolls
        self._employees = employees
        self._recent_days = int(recent_days)

    def attendance_summary(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> AttendanceSummary:
        if start > end:
            raise ValidationError("Start date must not be after end date")
        rows = self._attendance.summarize_by_status(company_id=int(company_id), start=start, end=end, employee_id=employee_id)
        counts = {s.value: 0 for s in AttendanceStatus}
        total_hours = Decimal("0.00")
        for r in rows:
            counts[r.status.value] = r.count
            total_hours += r.work_hours
        return AttendanceSummary(start=start, end=end, counts=counts, total_work_hours=total_hours)

    def payroll_summary(self, *, company_id: int, month, year) -> PayrollSummary:
        month, year = require_period(month, year)
        rows = self._payrolls.summarize_period(company_id=int(company_id), month=month, year=year)
        return PayrollSummary(month=month, year=year, by_status=sorted(rows, key=lambda r: r.status.value))

    def employee_dashboard(self, employee_id: int, today: date) -> EmployeeDashboard:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or employee.company_id is None:
            raise NotFoundError("Employee not found")

        start, end = month_range(today.year, today.month)
        summary = self.attendance_summary(
            company_id=employee.company_id,
            start=start,
            end=end,
            employee_id=employee.employee_id,
        )
        rows = self._attendance.list_for_company(
            company_id=employee.company_id,
            start=start,
            end=end,
            employee_id=employee.employee_id,
        )
        recent = sorted(rows, key=lambda r: r.work_date, reverse=True)[: self._recent_days]

        taken = max(employee.annual_leave_quota - employee.leave_balance, 0)
        return EmployeeDashboard(
            month=today.month,
            year=today.year,
            status_counts=summary.counts,
            total_work_hours=summary.total_work_hours,
            leave=LeaveSummary(
                total_quota=employee.annual_leave_quota,
                taken=taken,
                remaining=employee.leave_balance,
            ),
            recent_days=[
                {
                    "date": r.work_date.strftime("%Y-%m-%d"),
                    "status": r.status.value,
                    "work_hours": str(r.work_hours) if r.work_hours is not None else None,
                }
                for r in reversed(recent)
            ],
        )

    def payroll_csv(self, *, company_id: int, month, year) -> str:
        """CSV export of one payroll period."""

        month, year = require_period(month, year)
        records = self._payrolls.list_for_company(company_id=int(company_id), month=month, year=year)

        names: dict[int, str] = {}
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=PAYROLL_CSV_FIELDS)
        writer.writeheader()
        for p in sorted(records, key=lambda r: r.employee_id):
            if p.employee_id not in names:
                employee = self._employees.get_by_id(p.employee_id)
                names[p.employee_id] = employee.full_name if employee else ""
            writer.writerow(
                {
                    "payroll_id": p.payroll_id,
                    "employee_id": p.employee_id,
                    "full_name": names[p.employee_id],
                    "month": p.month,
                    "year": p.year,
                    "basic_salary": str(p.basic_salary),
                    "allowances": str(p.allowances),
                    "total_attendance": p.total_attendance,
                    "total_late_minutes": p.total_late_minutes,
                    "deductions": str(p.deductions),
                    "net_salary": str(p.net_salary),
                    "status": p.status.value,
                    "paid_at": p.paid_at.strftime("%Y-%m-%d %H:%M:%S") if p.paid_at else "",
                }
            )
        return out.getvalue()
