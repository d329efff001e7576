from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditService
from ..common.datetime_utils import end_of_day, is_weekend, iter_days, start_of_day, to_local
from ..companies.service import CompanySettingsService, HolidayCalendar, SubscriptionGate
from ..core.enums import AuditAction, LeaveStatus, LeaveType
from ..core.exceptions import (
    AlreadyProcessed,
    InsufficientBalance,
    NotFoundError,
    NoWorkingDays,
    OverlappingRequest,
    PayrollLocked,
    ReasonRequired,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .model import LeaveQuota, LeaveRequest, LeaveStats
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def weekdays_between(start: date, end: date) -> list[date]:
    return [d for d in iter_days(start, end) if not is_weekend(d)]


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        settings: CompanySettingsService,
        subscriptions: SubscriptionGate,
        holidays: HolidayCalendar,
        audit: AuditService,
        conn,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._attendance = attendance
        self._settings = settings
        self._subscriptions = subscriptions
        self._holidays = holidays
        self._audit = audit
        self._conn = conn
        self._clock = clock or _utcnow

    def _get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee or employee.company_id is None:
            raise NotFoundError("Employee not found")
        return employee

    def _local_now(self, company_id: int) -> datetime:
        company = self._settings.get_company(company_id)
        return to_local(self._clock(), self._settings.timezone_for(company))

    @staticmethod
    def _parse_type(value) -> LeaveType:
        try:
            return LeaveType(value)
        except ValueError:
            raise ValidationError(f"Unknown leave type {value!r}")

    def count_working_days(self, company_id: int, start: date, end: date) -> int:
        """Mon-Fri days in [start, end] that are not registered holidays."""
        holidays = self._holidays.holidays_between(company_id, start, end)
        return sum(1 for d in weekdays_between(start, end) if d not in holidays)

    def submit_leave_request(
        self,
        *,
        employee_id: int,
        leave_type,
        start_date: date,
        end_date: date,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        employee = self._get_employee(employee_id)
        self._subscriptions.ensure_active(employee.company_id)

        kind = self._parse_type(leave_type)
        if start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        start, end = start_of_day(start_date), end_of_day(end_date)

        if self._leaves.find_overlapping(employee_id=employee.employee_id, start=start, end=end):
            raise OverlappingRequest("You already have a leave request overlapping these dates")

        days_taken = self.count_working_days(employee.company_id, start_date, end_date)
        if days_taken <= 0:
            raise NoWorkingDays("Leave can only be requested for working days")

        if kind == LeaveType.ANNUAL and employee.leave_balance < days_taken:
            raise InsufficientBalance(
                f"Insufficient leave balance: {employee.leave_balance} day(s) left, {days_taken} requested"
            )

        leave_id = self._leaves.create(
            employee_id=employee.employee_id,
            company_id=employee.company_id,
            leave_type=kind,
            start=start,
            end=end,
            days_taken=days_taken,
            reason=(reason or "").strip() or None,
        )
        logger.info("Leave request %s submitted by employee %s (%s, %d days)", leave_id, employee.employee_id, kind.value, days_taken)
        return self._leaves.get_by_id(leave_id)

    def review_leave_request(
        self,
        *,
        actor_id: int,
        company_id: int,
        request_id: int,
        decision,
        rejected_reason: Optional[str] = None,
    ) -> LeaveRequest:
        self._subscriptions.ensure_active(company_id)
        leave = self.get_leave(request_id, company_id=company_id)
        if leave.status != LeaveStatus.PENDING:
            raise AlreadyProcessed("This leave request has already been processed")

        try:
            decision = LeaveStatus(decision)
        except ValueError:
            raise ValidationError("Decision must be 'Approved' or 'Rejected'")
        if decision == LeaveStatus.PENDING:
            raise ValidationError("Decision must be 'Approved' or 'Rejected'")

        reviewed_at = self._local_now(leave.company_id)
        if decision == LeaveStatus.REJECTED:
            reason = rejected_reason.strip() if isinstance(rejected_reason, str) else ""
            if not reason:
                raise ReasonRequired("A rejection reason is required")
            if not self._leaves.set_status_if_pending(
                leave_id=leave.leave_id,
                status=LeaveStatus.REJECTED,
                reviewed_by=int(actor_id),
                reviewed_at=reviewed_at,
                rejected_reason=reason,
            ):
                raise AlreadyProcessed("This leave request has already been processed")
            self._audit.record(
                actor_id=actor_id,
                company_id=leave.company_id,
                action=AuditAction.LEAVE_REJECTED,
                target=f"leave:{leave.leave_id}",
                details={"employee_id": leave.employee_id, "rejected_reason": reason},
            )
            logger.info("Leave request %s rejected by %s", leave.leave_id, actor_id)
            return self._leaves.get_by_id(leave.leave_id)

        self._approve(actor_id=int(actor_id), leave=leave, reviewed_at=reviewed_at)
        self._audit.record(
            actor_id=actor_id,
            company_id=leave.company_id,
            action=AuditAction.LEAVE_APPROVED,
            target=f"leave:{leave.leave_id}",
            details={
                "employee_id": leave.employee_id,
                "leave_type": leave.leave_type.value,
                "days_taken": leave.days_taken,
            },
        )
        logger.info("Leave request %s approved by %s", leave.leave_id, actor_id)
        return self._leaves.get_by_id(leave.leave_id)

    def _approve(self, *, actor_id: int, leave: LeaveRequest, reviewed_at: datetime) -> None:
        # Holidays are not consulted here; every Mon-Fri day gets a leave row.
        days = weekdays_between(leave.start_date.date(), leave.end_date.date())

        with self._conn.transaction():
            locked = self._attendance.find_locked_dates(employee_id=leave.employee_id, days=days)
            if locked:
                raise PayrollLocked(
                    "Attendance is already locked by payroll on " + ", ".join(d.isoformat() for d in locked)
                )

            if not self._leaves.set_status_if_pending(
                leave_id=leave.leave_id,
                status=LeaveStatus.APPROVED,
                reviewed_by=actor_id,
                reviewed_at=reviewed_at,
                rejected_reason=None,
            ):
                raise AlreadyProcessed("This leave request has already been processed")

            if leave.leave_type == LeaveType.ANNUAL:
                if not self._employees.decrement_leave_balance(employee_id=leave.employee_id, days=leave.days_taken):
                    raise InsufficientBalance("Insufficient leave balance to approve this request")

            for day in days:
                self._attendance.upsert_leave_day(
                    employee_id=leave.employee_id,
                    company_id=leave.company_id,
                    work_date=day,
                    status=leave.attendance_status,
                    leave_id=leave.leave_id,
                )

    def cancel_leave_request(self, *, employee_id: int, request_id: int) -> None:
        leave = self._leaves.get_by_id(int(request_id))
        if not leave or leave.employee_id != int(employee_id):
            raise NotFoundError("Leave request not found")
        if leave.status != LeaveStatus.PENDING:
            raise AlreadyProcessed("Only pending requests can be cancelled")
        if not self._leaves.delete_pending(leave_id=leave.leave_id, employee_id=leave.employee_id):
            raise AlreadyProcessed("Only pending requests can be cancelled")
        logger.info("Leave request %s cancelled by employee %s", leave.leave_id, employee_id)

    def list_leaves(
        self,
        *,
        company_id: int,
        employee_id: Optional[int] = None,
        status=None,
        leave_type=None,
    ) -> list[LeaveRequest]:
        try:
            status = LeaveStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown leave status {status!r}")
        kind = self._parse_type(leave_type) if leave_type else None
        return list(
            self._leaves.list_for_company(
                company_id=int(company_id),
                employee_id=employee_id,
                status=status,
                leave_type=kind,
            )
        )

    def get_leave(self, request_id: int, *, company_id: int, employee_id: Optional[int] = None) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(request_id))
        if not leave or leave.company_id != int(company_id):
            raise NotFoundError("Leave request not found")
        if employee_id is not None and leave.employee_id != int(employee_id):
            raise NotFoundError("Leave request not found")
        return leave

    def get_quota(self, employee_id: int) -> LeaveQuota:
        employee = self._get_employee(employee_id)
        return LeaveQuota(annual_leave_quota=employee.annual_leave_quota, leave_balance=employee.leave_balance)

    def active_leaves_today(self, company_id: int) -> list[LeaveRequest]:
        today = self._local_now(company_id).date()
        return list(self._leaves.list_approved_on(company_id=int(company_id), day=today))

    def leave_stats(self, company_id: int) -> LeaveStats:
        counts = self._leaves.count_by_status(int(company_id))
        return LeaveStats(
            pending=counts.get(LeaveStatus.PENDING, 0),
            approved=counts.get(LeaveStatus.APPROVED, 0),
        )
