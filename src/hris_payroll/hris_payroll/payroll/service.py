from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..audit.service import AuditService
from ..common.datetime_utils import month_range, to_local
from ..common.validators import require_period
from ..companies.service import CompanySettingsService, SubscriptionGate
from ..core.constants import GLOBAL_PAYROLL_LOG_LIMIT, MANUAL_PAYMENT_METHOD
from ..core.enums import AuditAction, PayrollStatus, Role
from ..core.exceptions import AuthorizationError, CannotDeletePaid, InvalidTransition, NotFoundError, ValidationError
from ..core.permissions import Actor
from ..employees.repository import EmployeeRepository, SalaryProfileRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import GenerationResult, PayrollDetail, PayrollRecord, PayrollStats
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

# Review -> Approved -> Paid, one step at a time. Draft only leaves through calculate_payroll.
_NEXT_STATUS = {
    PayrollStatus.REVIEW: PayrollStatus.APPROVED,
    PayrollStatus.APPROVED: PayrollStatus.PAID,
}

_CALCULABLE = frozenset({PayrollStatus.DRAFT, PayrollStatus.REVIEW})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PayrollService:
    def __init__(
        self,
        payrolls: PayrollRepository,
        employees: EmployeeRepository,
        profiles: SalaryProfileRepository,
        attendance: AttendanceRepository,
        settings: CompanySettingsService,
        subscriptions: SubscriptionGate,
        audit: AuditService,
        conn,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._payrolls = payrolls
        self._employees = employees
        self._profiles = profiles
        self._attendance = attendance
        self._settings = settings
        self._subscriptions = subscriptions
        self._audit = audit
        self._conn = conn
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock or _utcnow

    def _local_now(self, company_id: int) -> datetime:
        company = self._settings.get_company(company_id)
        return to_local(self._clock(), self._settings.timezone_for(company))

    def _get_for_company(self, payroll_id: int, company_id: int) -> PayrollRecord:
        record = self._payrolls.get_by_id(int(payroll_id))
        if not record or record.company_id != int(company_id):
            raise NotFoundError("Payroll not found")
        return record

    def generate_payroll_period(self, *, actor_id: int, company_id: int, month, year) -> GenerationResult:
        """Create one Draft per eligible employee; existing periods are left alone."""

        month, year = require_period(month, year)
        self._subscriptions.ensure_active(company_id)

        created = skipped = 0
        for employee in self._employees.list_payroll_eligible(int(company_id)):
            profile = self._profiles.get_by_id(employee.position_id) if employee.position_id else None
            if not profile:
                skipped += 1
                continue
            if self._payrolls.create_draft_if_absent(
                employee_id=employee.employee_id,
                company_id=int(company_id),
                month=month,
                year=year,
                profile=profile,
            ):
                created += 1
            else:
                skipped += 1

        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.PAYROLL_GENERATED,
            target=f"period:{year}-{month:02d}",
            details={"created": created, "skipped": skipped},
        )
        logger.info("Payroll %04d-%02d generated for company %s: %d created, %d skipped", year, month, company_id, created, skipped)
        return GenerationResult(created=created, skipped=skipped)

    def calculate_payroll(self, *, actor_id: int, company_id: int, payroll_id: int) -> PayrollRecord:
        self._subscriptions.ensure_active(company_id)

        with self._conn.transaction():
            record = self._payrolls.get_for_update(int(payroll_id))
            if not record or record.company_id != int(company_id):
                raise NotFoundError("Payroll not found")
            if record.status not in _CALCULABLE:
                raise InvalidTransition(f"A {record.status.value} payroll can no longer be calculated")

            start, end = month_range(record.year, record.month)
            totals = self._attendance.totals_for_payroll(employee_id=record.employee_id, start=start, end=end)
            breakdown = self._calculator.calculate(record, totals)

            self._attendance.lock_range(
                employee_id=record.employee_id,
                start=start,
                end=end,
                payroll_id=record.payroll_id,
            )
            self._payrolls.save_calculation(
                payroll_id=record.payroll_id,
                total_attendance=breakdown.total_attendance,
                total_late_minutes=breakdown.total_late_minutes,
                deductions=breakdown.late_deduction,
                net_salary=breakdown.net_salary,
                status=PayrollStatus.REVIEW,
            )

        self._audit.record(
            actor_id=actor_id,
            company_id=record.company_id,
            action=AuditAction.PAYROLL_CALCULATED,
            target=f"payroll:{record.payroll_id}",
            details={
                "total_attendance": breakdown.total_attendance,
                "total_late_minutes": breakdown.total_late_minutes,
                "deductions": str(breakdown.late_deduction),
                "net_salary": str(breakdown.net_salary),
            },
        )
        logger.info("Payroll %s calculated: net=%s", record.payroll_id, breakdown.net_salary)
        return self._payrolls.get_by_id(record.payroll_id)

    def approve_all_monthly(self, *, actor_id: int, company_id: int, month, year) -> int:
        month, year = require_period(month, year)
        self._subscriptions.ensure_active(company_id)
        count = self._payrolls.transition_period(
            company_id=int(company_id),
            month=month,
            year=year,
            from_status=PayrollStatus.REVIEW,
            to_status=PayrollStatus.APPROVED,
        )
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.PAYROLL_APPROVED,
            target=f"period:{year}-{month:02d}",
            details={"approved": count},
        )
        return count

    def record_bulk_payment(self, *, actor_id: int, company_id: int, payroll_ids: Sequence[int]) -> int:
        try:
            ids = sorted({int(i) for i in payroll_ids or []})
        except (TypeError, ValueError):
            raise ValidationError("Payroll ids must be integers")
        if not ids:
            raise ValidationError("No payroll selected")
        self._subscriptions.ensure_active(company_id)

        count = self._payrolls.mark_paid(
            company_id=int(company_id),
            payroll_ids=ids,
            paid_at=self._local_now(company_id),
            payment_method=MANUAL_PAYMENT_METHOD,
        )
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.PAYROLL_PAID,
            target="payroll:" + ",".join(str(i) for i in ids),
            details={"requested": len(ids), "paid": count, "payment_method": MANUAL_PAYMENT_METHOD},
        )
        logger.info("Bulk payment for company %s: %d of %d payroll(s) paid", company_id, count, len(ids))
        return count

    def update_status(self, *, actor_id: int, company_id: int, payroll_id: int, status) -> PayrollRecord:
        try:
            target = PayrollStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown payroll status {status!r}")

        self._subscriptions.ensure_active(company_id)
        record = self._get_for_company(payroll_id, company_id)
        if record.status == PayrollStatus.DRAFT:
            raise InvalidTransition("Calculate the payroll first")
        if _NEXT_STATUS.get(record.status) != target:
            raise InvalidTransition(f"Cannot move payroll from {record.status.value} to {target.value}")

        paid = target == PayrollStatus.PAID
        if not self._payrolls.set_status(
            payroll_id=record.payroll_id,
            from_status=record.status,
            to_status=target,
            paid_at=self._local_now(record.company_id) if paid else None,
            payment_method=MANUAL_PAYMENT_METHOD if paid else None,
        ):
            raise InvalidTransition("Payroll status changed concurrently; reload and retry")

        self._audit.record(
            actor_id=actor_id,
            company_id=record.company_id,
            action=AuditAction.PAYROLL_STATUS_CHANGED,
            target=f"payroll:{record.payroll_id}",
            details={"old_status": record.status.value, "new_status": target.value},
        )
        return self._payrolls.get_by_id(record.payroll_id)

    def delete_payroll(self, *, actor_id: int, company_id: int, payroll_id: int) -> None:
        self._subscriptions.ensure_active(company_id)

        with self._conn.transaction():
            record = self._payrolls.get_for_update(int(payroll_id))
            if not record or record.company_id != int(company_id):
                raise NotFoundError("Payroll not found")
            if record.status == PayrollStatus.PAID:
                raise CannotDeletePaid("A paid payroll cannot be deleted")

            unlocked = self._attendance.unlock_for_payroll(record.payroll_id)
            if not self._payrolls.delete_unless_paid(record.payroll_id):
                raise CannotDeletePaid("A paid payroll cannot be deleted")

        self._audit.record(
            actor_id=actor_id,
            company_id=record.company_id,
            action=AuditAction.PAYROLL_DELETED,
            target=f"payroll:{record.payroll_id}",
            details={"employee_id": record.employee_id, "period": f"{record.year}-{record.month:02d}", "unlocked": unlocked},
        )
        logger.info("Payroll %s deleted, %d attendance row(s) unlocked", record.payroll_id, unlocked)

    def list_payrolls(self, *, company_id: int, month=None, year=None, status=None) -> list[PayrollRecord]:
        try:
            status = PayrollStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Unknown payroll status {status!r}")
        return list(
            self._payrolls.list_for_company(
                company_id=int(company_id),
                month=int(month) if month else None,
                year=int(year) if year else None,
                status=status,
            )
        )

    def get_payroll_detail(self, payroll_id: int, viewer: Actor) -> PayrollDetail:
        record = self._payrolls.get_by_id(int(payroll_id))
        if not record:
            raise NotFoundError("Payroll not found")
        if viewer.role == Role.EMPLOYEE and record.employee_id != viewer.employee_id:
            raise AuthorizationError("You can only view your own payslips")
        if viewer.role != Role.SUPERADMIN and record.company_id != viewer.company_id:
            raise NotFoundError("Payroll not found")

        start, end = month_range(record.year, record.month)
        rows = self._attendance.list_for_company(
            company_id=record.company_id,
            start=start,
            end=end,
            employee_id=record.employee_id,
        )
        return PayrollDetail(payroll=record, attendance=sorted(rows, key=lambda r: r.work_date))

    def my_payslips(self, employee_id: int) -> list[PayrollRecord]:
        return list(
            self._payrolls.list_for_employee(
                employee_id=int(employee_id),
                statuses=(PayrollStatus.APPROVED, PayrollStatus.PAID),
            )
        )

    def payroll_stats(self, company_id: int) -> PayrollStats:
        return self._payrolls.paid_stats(int(company_id))

    def list_recent_global(self, *, limit: int = GLOBAL_PAYROLL_LOG_LIMIT) -> list[PayrollRecord]:
        """Latest payrolls across every tenant, newest first."""

        limit = max(1, min(int(limit), GLOBAL_PAYROLL_LOG_LIMIT))
        return list(self._payrolls.list_recent(limit=limit))
