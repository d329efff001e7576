from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceTotals
from ..model import PayrollBreakdown, PayrollRecord


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, payroll: PayrollRecord, totals: AttendanceTotals) -> PayrollBreakdown:
        raise NotImplementedError
