from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Sequence

from ..audit.service import AuditService
from ..common.datetime_utils import is_weekend, to_local
from ..common.geo import format_coordinates, haversine_m
from ..common.money import hours_between
from ..common.validators import require_coordinates
from ..companies.model import Company
from ..companies.service import CompanySettingsService, HolidayCalendar, SubscriptionGate
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import LEAVE_STATUSES, AttendanceStatus, AuditAction, ClockType
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AuthorizationError,
    ConflictingLeaveStatus,
    NoClockInFound,
    NonWorkingDay,
    NotFoundError,
    OutOfRange,
    PayrollLocked,
    ReasonRequired,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .strategies.late_strategy import late_minutes

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttendanceService:
    """Geofenced clock-in/out engine and manual corrections."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        settings: CompanySettingsService,
        subscriptions: SubscriptionGate,
        holidays: HolidayCalendar,
        audit: AuditService,
        conn,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._settings = settings
        self._subscriptions = subscriptions
        self._holidays = holidays
        self._audit = audit
        self._conn = conn
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock or _utcnow

    def _employee_context(self, employee_id: int) -> tuple[Employee, Company, str]:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.company_id is None:
            raise ValidationError("Employee is not assigned to a company")
        company = self._settings.get_company(employee.company_id)
        return employee, company, self._settings.timezone_for(company)

    def _today(self, tz_name: str) -> date:
        return to_local(self._clock(), tz_name).date()

    def company_today(self, company_id: int) -> date:
        company = self._settings.get_company(company_id)
        return self._today(self._settings.timezone_for(company))

    @staticmethod
    def _check_geofence(company: Company, coordinates) -> Optional[str]:
        if coordinates is None:
            if company.has_geofence:
                raise ValidationError("Location is required to clock in or out")
            return None

        lat, lon = require_coordinates(*coordinates)
        if company.has_geofence:
            distance = haversine_m(lat, lon, float(company.office_latitude), float(company.office_longitude))
            radius = float(company.office_radius_m)
            if distance > radius:
                raise OutOfRange(
                    f"You are {distance:.0f} m from the office; the allowed radius is {radius:.0f} m",
                    distance_m=distance,
                    radius_m=radius,
                )
        return format_coordinates(lat, lon)

    def _non_working_reason(self, company_id: int, work_date: date) -> Optional[str]:
        if is_weekend(work_date):
            return f"Cannot clock in on a weekend ({work_date.strftime('%A')})"
        holiday = self._holidays.holiday_on(company_id, work_date)
        if holiday:
            return f"Cannot clock in on a holiday ({holiday.name})"
        return None

    def record_clock_event(
        self,
        employee_id: int,
        clock_type: ClockType | str,
        *,
        coordinates: Optional[tuple[float, float]] = None,
        device_info: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> AttendanceRecord:
        try:
            clock_type = ClockType(clock_type)
        except ValueError:
            raise ValidationError("Clock type must be 'In' or 'Out'")

        employee, company, tz_name = self._employee_context(employee_id)
        if not employee.is_active:
            raise AuthorizationError("Your account is inactive")

        self._subscriptions.ensure_active(company.company_id)
        location = self._check_geofence(company, coordinates)

        event_at = to_local(timestamp or self._clock(), tz_name)
        work_date = event_at.date()

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
        if existing and existing.is_payroll_processed:
            raise PayrollLocked("Attendance for this day is already locked by payroll")
        if existing and existing.status in LEAVE_STATUSES:
            raise ConflictingLeaveStatus(f"You are on approved leave today ({existing.status.value})")

        if clock_type == ClockType.IN:
            return self._clock_in(employee, company, existing, event_at, location, device_info)
        return self._clock_out(employee, existing, event_at, location)

    def _clock_in(
        self,
        employee: Employee,
        company: Company,
        existing: Optional[AttendanceRecord],
        event_at: datetime,
        location: Optional[str],
        device_info: Optional[str],
    ) -> AttendanceRecord:
        work_date = event_at.date()
        if existing and existing.clock_in is not None:
            raise AlreadyClockedIn("You have already clocked in today")

        reason = self._non_working_reason(company.company_id, work_date)
        if reason:
            raise NonWorkingDay(reason)

        scheduled_start = datetime.combine(work_date, self._settings.work_start_for(company))
        strategy = self._factory.for_clock_in(event_at=event_at, scheduled_start=scheduled_start)
        decision = strategy.decide_clock_in(event_at=event_at, scheduled_start=scheduled_start)

        claimed = self._attendance.claim_clock_in(
            employee_id=employee.employee_id,
            company_id=company.company_id,
            work_date=work_date,
            clock_in=event_at,
            status=decision.status,
            is_late=decision.is_late,
            late_minutes=decision.late_minutes,
            location=location,
            device_info=(device_info or "").strip() or None,
        )
        if not claimed:
            # Lost a race: report why the row refused the clock-in.
            current = self._attendance.get_for_employee_and_date(employee.employee_id, work_date)
            if current and current.is_payroll_processed:
                raise PayrollLocked("Attendance for this day is already locked by payroll")
            if current and current.status in LEAVE_STATUSES:
                raise ConflictingLeaveStatus(f"You are on approved leave today ({current.status.value})")
            raise AlreadyClockedIn("You have already clocked in today")

        logger.info(
            "Employee %s clocked in at %s (%s, late=%s min)",
            employee.employee_id,
            event_at.isoformat(),
            decision.status.value,
            decision.late_minutes,
        )
        return self._attendance.get_for_employee_and_date(employee.employee_id, work_date)

    def _clock_out(
        self,
        employee: Employee,
        existing: Optional[AttendanceRecord],
        event_at: datetime,
        location: Optional[str],
    ) -> AttendanceRecord:
        if not existing or existing.clock_in is None:
            raise NoClockInFound("You have not clocked in today")
        if existing.clock_out is not None:
            raise AlreadyClockedOut("You have already clocked out today")
        if event_at < existing.clock_in:
            raise ValidationError("Clock-out cannot be earlier than clock-in")

        work_hours = hours_between(existing.clock_in, event_at)
        ok = self._attendance.record_clock_out(
            attendance_id=existing.attendance_id,
            clock_out=event_at,
            work_hours=work_hours,
            location=location,
        )
        if not ok:
            current = self._attendance.get_by_id(existing.attendance_id)
            if current and current.is_payroll_processed:
                raise PayrollLocked("Attendance for this day is already locked by payroll")
            raise AlreadyClockedOut("You have already clocked out today")

        logger.info("Employee %s clocked out at %s (%s h)", employee.employee_id, event_at.isoformat(), work_hours)
        return self._attendance.get_by_id(existing.attendance_id)

    def _load_for_company(self, attendance_id: int, company_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record or record.company_id != int(company_id):
            raise NotFoundError("Attendance record not found")
        return record

    @staticmethod
    def _parse_status(status) -> AttendanceStatus:
        try:
            return AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status {status!r}")

    def _lateness_for(self, company_id: int, status: AttendanceStatus, record: AttendanceRecord, clock_in):
        if status != AttendanceStatus.LATE:
            return False, 0
        if clock_in is None:
            return True, record.late_duration_minutes
        company = self._settings.get_company(company_id)
        scheduled_start = datetime.combine(record.work_date, self._settings.work_start_for(company))
        return True, late_minutes(clock_in, scheduled_start)

    @staticmethod
    def _on_work_date(record: AttendanceRecord, value) -> Optional[datetime]:
        # A bare time of day is taken on the record's own date.
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, time):
            return datetime.combine(record.work_date, value)
        raise ValidationError("Clock times must be datetimes or times of day")

    def correct_attendance(
        self,
        *,
        actor_id: int,
        company_id: int,
        attendance_id: int,
        status,
        reason: str,
        clock_in: Optional[datetime | time] = None,
        clock_out: Optional[datetime | time] = None,
    ) -> AttendanceRecord:
        record = self._load_for_company(attendance_id, company_id)
        if record.is_payroll_processed:
            raise PayrollLocked("This attendance record is locked by payroll and cannot be edited")
        if not (reason or "").strip():
            raise ReasonRequired("A reason is required for manual corrections")

        new_status = self._parse_status(status)
        new_in = self._on_work_date(record, clock_in) or record.clock_in
        new_out = self._on_work_date(record, clock_out) or record.clock_out
        if new_in and new_out and new_out < new_in:
            raise ValidationError("Clock-out cannot be earlier than clock-in")

        work_hours = hours_between(new_in, new_out) if new_in and new_out else record.work_hours
        is_late, minutes = self._lateness_for(record.company_id, new_status, record, new_in)

        ok = self._attendance.correct(
            attendance_id=record.attendance_id,
            status=new_status,
            clock_in=new_in,
            clock_out=new_out,
            is_late=is_late,
            late_minutes=minutes,
            work_hours=work_hours,
            note=reason.strip(),
        )
        if not ok:
            raise PayrollLocked("This attendance record is locked by payroll and cannot be edited")

        self._audit.record(
            actor_id=actor_id,
            company_id=record.company_id,
            action=AuditAction.ATTENDANCE_CORRECTED,
            target=f"attendance:{record.attendance_id}",
            details={
                "old_status": record.status.value,
                "new_status": new_status.value,
                "reason": reason.strip(),
                "clock_in": new_in.isoformat() if new_in else None,
                "clock_out": new_out.isoformat() if new_out else None,
            },
        )
        logger.info("Attendance %s corrected by %s: %s -> %s", record.attendance_id, actor_id, record.status.value, new_status.value)
        return self._attendance.get_by_id(record.attendance_id)

    def bulk_correct_status(
        self,
        *,
        actor_id: int,
        company_id: int,
        attendance_ids: Sequence[int],
        status,
        reason: str,
    ) -> int:
        """Set one status on many rows; a single locked row aborts the batch."""

        if not (reason or "").strip():
            raise ReasonRequired("A reason is required for manual corrections")
        try:
            ids = sorted({int(i) for i in attendance_ids or []})
        except (TypeError, ValueError):
            raise ValidationError("Attendance ids must be integers")
        if not ids:
            raise ValidationError("No attendance records selected")
        new_status = self._parse_status(status)

        changed: list[AttendanceRecord] = []
        with self._conn.transaction():
            for attendance_id in ids:
                record = self._load_for_company(attendance_id, company_id)
                if record.is_payroll_processed:
                    raise PayrollLocked(f"Attendance record {attendance_id} is locked by payroll")
                is_late, minutes = self._lateness_for(record.company_id, new_status, record, record.clock_in)
                ok = self._attendance.correct(
                    attendance_id=record.attendance_id,
                    status=new_status,
                    clock_in=record.clock_in,
                    clock_out=record.clock_out,
                    is_late=is_late,
                    late_minutes=minutes,
                    work_hours=record.work_hours,
                    note=reason.strip(),
                )
                if not ok:
                    raise PayrollLocked(f"Attendance record {attendance_id} is locked by payroll")
                changed.append(record)

        for record in changed:
            self._audit.record(
                actor_id=actor_id,
                company_id=record.company_id,
                action=AuditAction.ATTENDANCE_CORRECTED,
                target=f"attendance:{record.attendance_id}",
                details={"old_status": record.status.value, "new_status": new_status.value, "reason": reason.strip()},
            )
        logger.info("Bulk correction by %s: %d rows -> %s", actor_id, len(changed), new_status.value)
        return len(changed)

    def get_today(self, employee_id: int) -> Optional[AttendanceRecord]:
        employee, _, tz_name = self._employee_context(employee_id)
        return self._attendance.get_for_employee_and_date(employee.employee_id, self._today(tz_name))

    def get_history(self, employee_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRecord]:
        limit = min(max(int(limit), 1), 366)
        return list(self._attendance.list_recent_for_employee(int(employee_id), limit))

    def list_company_attendance(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> list[AttendanceRecord]:
        if start > end:
            raise ValidationError("Start date must not be after end date")
        return list(
            self._attendance.list_for_company(company_id=int(company_id), start=start, end=end, employee_id=employee_id)
        )
