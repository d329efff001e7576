from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from ..payroll.model import PeriodStatusTotal


@dataclass(frozen=True)
class AttendanceSummary:
    start: date
    end: date
    counts: dict[str, int]
    total_work_hours: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    month: int
    year: int
    by_status: list[PeriodStatusTotal]

    @property
    def total_count(self) -> int:
        return sum(s.count for s in self.by_status)

    @property
    def total_net(self) -> Decimal:
        return sum((s.total_net for s in self.by_status), Decimal("0.00"))


@dataclass(frozen=True)
class LeaveSummary:
    total_quota: int
    taken: int
    remaining: int


@dataclass(frozen=True)
class EmployeeDashboard:
    """Read-model for the employee home screen (current month)."""

    month: int
    year: int
    status_counts: dict[str, int]
    total_work_hours: Decimal
    leave: LeaveSummary
    recent_days: list[dict] = field(default_factory=list)
