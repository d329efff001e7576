from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import PayrollStatus


@dataclass(frozen=True)
class PayrollRecord:
    """Monthly salary slip of one employee.

    Salary parameters are snapshotted at generation time; later edits of the
    salary profile never change an existing record.
    """

    payroll_id: int
    employee_id: int
    company_id: int
    month: int
    year: int
    basic_salary: Decimal
    allowances: Decimal
    meal_allowance_snapshot: Decimal
    transport_allowance_snapshot: Decimal
    late_deduction_rate_snapshot: Decimal
    hourly_rate_snapshot: Decimal
    total_attendance: int = 0
    total_late_minutes: int = 0
    deductions: Decimal = Decimal("0.00")
    net_salary: Decimal = Decimal("0.00")
    status: PayrollStatus = PayrollStatus.DRAFT
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None


@dataclass(frozen=True)
class PayrollBreakdown:
    total_attendance: int
    total_late_minutes: int
    daily_benefits: Decimal
    late_deduction: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class GenerationResult:
    created: int
    skipped: int


@dataclass(frozen=True)
class PayrollDetail:
    payroll: PayrollRecord
    attendance: list[AttendanceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class PayrollStats:
    paid_count: int
    total_paid: Decimal


@dataclass(frozen=True)
class PeriodStatusTotal:
    status: PayrollStatus
    count: int
    total_net: Decimal
