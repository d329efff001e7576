from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import ContractType, EmployeeStatus, Role


@dataclass(frozen=True)
class SalaryProfile:
    """Named position of a tenant holding salary parameters."""

    position_id: int
    company_id: int
    position_name: str
    base_salary: Decimal
    allowance: Decimal
    meal_allowance: Decimal
    transport_allowance: Decimal
    hourly_rate: Decimal
    late_deduction_per_min: Decimal


@dataclass(frozen=True)
class Employee:
    employee_id: int
    company_id: Optional[int]
    full_name: str
    email: str
    role: Role
    status: EmployeeStatus
    position_id: Optional[int]
    annual_leave_quota: int
    leave_balance: int
    join_date: Optional[date] = None
    contract_type: ContractType = ContractType.CONTRACT

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
