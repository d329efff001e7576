from decimal import Decimal

from src.hris_payroll.hris_payroll.attendance.model import AttendanceTotals
from src.hris_payroll.hris_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.hris_payroll.hris_payroll.payroll.model import PayrollRecord


def _payroll(**overrides) -> PayrollRecord:
    values = dict(
        payroll_id=1,
        employee_id=2,
        company_id=1,
        month=3,
        year=2025,
        basic_salary=Decimal("5000000"),
        allowances=Decimal("0"),
        meal_allowance_snapshot=Decimal("20000"),
        transport_allowance_snapshot=Decimal("15000"),
        late_deduction_rate_snapshot=Decimal("1000"),
        hourly_rate_snapshot=Decimal("0"),
    )
    values.update(overrides)
    return PayrollRecord(**values)


def test_standard_calculator_net_salary():
    breakdown = StandardPayrollCalculator().calculate(_payroll(), AttendanceTotals(total_attendance=20, total_late_minutes=30))

    assert breakdown.daily_benefits == Decimal("700000.00")
    assert breakdown.late_deduction == Decimal("30000.00")
    assert breakdown.net_salary == Decimal("5670000.00")


def test_standard_calculator_adds_fixed_allowance():
    breakdown = StandardPayrollCalculator().calculate(
        _payroll(allowances=Decimal("250000.50")),
        AttendanceTotals(total_attendance=0, total_late_minutes=0),
    )

    assert breakdown.net_salary == Decimal("5250000.50")


def test_standard_calculator_does_not_clamp_net_salary():
    breakdown = StandardPayrollCalculator().calculate(
        _payroll(basic_salary=Decimal("100000")),
        AttendanceTotals(total_attendance=1, total_late_minutes=200),
    )

    assert breakdown.net_salary == Decimal("-65000.00")
