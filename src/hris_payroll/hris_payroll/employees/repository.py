from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import Employee, SalaryProfile


class EmployeeRepository(Protocol):
    """Employee directory as seen by the payroll/attendance/leave core."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_payroll_eligible(self, company_id: int) -> Sequence[Employee]:
        """Active employees (role=employee) that have a salary profile."""

        raise NotImplementedError

    def decrement_leave_balance(self, *, employee_id: int, days: int) -> bool:
        """Atomically subtract ``days``; returns False if the balance is too low."""

        raise NotImplementedError

    def set_leave_quota(self, *, employee_id: int, quota: int, balance_delta: int) -> bool:
        raise NotImplementedError


class SalaryProfileRepository(Protocol):
    def get_by_id(self, position_id: int) -> Optional[SalaryProfile]:
        raise NotImplementedError

    def get_by_name(self, *, company_id: int, position_name: str) -> Optional[SalaryProfile]:
        raise NotImplementedError

    def list_for_company(self, company_id: int) -> Sequence[SalaryProfile]:
        raise NotImplementedError

    def create(
        self,
        *,
        company_id: int,
        position_name: str,
        base_salary: Decimal,
        allowance: Decimal,
        meal_allowance: Decimal,
        transport_allowance: Decimal,
        hourly_rate: Decimal,
        late_deduction_per_min: Decimal,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        position_id: int,
        position_name: str,
        base_salary: Decimal,
        allowance: Decimal,
        meal_allowance: Decimal,
        transport_allowance: Decimal,
        hourly_rate: Decimal,
        late_deduction_per_min: Decimal,
    ) -> bool:
        raise NotImplementedError
