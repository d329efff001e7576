from __future__ import annotations

from decimal import Decimal

from ...attendance.model import AttendanceTotals
from ...common.money import to_money
from ..model import PayrollBreakdown, PayrollRecord
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule, on the snapshotted rates only.

    net = basic + allowances + (meal + transport) * days - late_minutes * late_rate
    """

    def calculate(self, payroll: PayrollRecord, totals: AttendanceTotals) -> PayrollBreakdown:
        days = Decimal(int(totals.total_attendance))
        late_minutes = Decimal(int(totals.total_late_minutes))

        daily_benefits = to_money((payroll.meal_allowance_snapshot + payroll.transport_allowance_snapshot) * days)
        late_deduction = to_money(late_minutes * payroll.late_deduction_rate_snapshot)
        net_salary = to_money(payroll.basic_salary + payroll.allowances + daily_benefits - late_deduction)

        return PayrollBreakdown(
            total_attendance=int(totals.total_attendance),
            total_late_minutes=int(totals.total_late_minutes),
            daily_benefits=daily_benefits,
            late_deduction=late_deduction,
            net_salary=net_salary,
        )
