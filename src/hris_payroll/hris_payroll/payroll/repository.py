from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollStatus
from ..employees.model import SalaryProfile
from .model import PayrollRecord, PayrollStats, PeriodStatusTotal


class PayrollRepository(Protocol):
    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_for_update(self, payroll_id: int) -> Optional[PayrollRecord]:
        """Read and row-lock the record for the rest of the open transaction."""

        raise NotImplementedError

    def create_draft_if_absent(
        self,
        *,
        employee_id: int,
        company_id: int,
        month: int,
        year: int,
        profile: SalaryProfile,
    ) -> bool:
        """Insert a Draft with profile snapshots; False if the period already exists."""

        raise NotImplementedError

    def save_calculation(
        self,
        *,
        payroll_id: int,
        total_attendance: int,
        total_late_minutes: int,
        deductions: Decimal,
        net_salary: Decimal,
        status: PayrollStatus,
    ) -> None:
        raise NotImplementedError

    def set_status(
        self,
        *,
        payroll_id: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
        paid_at: Optional[datetime] = None,
        payment_method: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def transition_period(
        self,
        *,
        company_id: int,
        month: int,
        year: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
    ) -> int:
        raise NotImplementedError

    def mark_paid(
        self,
        *,
        company_id: int,
        payroll_ids: Sequence[int],
        paid_at: datetime,
        payment_method: str,
    ) -> int:
        """Review/Approved records among ``payroll_ids`` become Paid."""

        raise NotImplementedError

    def delete_unless_paid(self, payroll_id: int) -> bool:
        raise NotImplementedError

    def list_for_company(
        self,
        *,
        company_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def list_for_employee(self, *, employee_id: int, statuses: Sequence[PayrollStatus]) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def paid_stats(self, company_id: int) -> PayrollStats:
        raise NotImplementedError

    def list_recent(self, *, limit: int) -> Sequence[PayrollRecord]:
        """Newest payrolls across all companies."""

        raise NotImplementedError

    def summarize_period(self, *, company_id: int, month: int, year: int) -> Sequence[PeriodStatusTotal]:
        raise NotImplementedError
