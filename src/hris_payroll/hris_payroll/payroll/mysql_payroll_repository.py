from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import PayrollStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from ..employees.model import SalaryProfile
from .model import PayrollRecord, PayrollStats, PeriodStatusTotal
from .repository import PayrollRepository

_COLUMNS = """
    payroll_id, employee_id, company_id, month, year, basic_salary, allowances,
    meal_allowance_snapshot, transport_allowance_snapshot, late_deduction_rate_snapshot,
    hourly_rate_snapshot, total_attendance, total_late_minutes, deductions, net_salary,
    status, paid_at, payment_method
"""


def _to_payroll(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        basic_salary=as_decimal(r["basic_salary"]),
        allowances=as_decimal(r["allowances"]),
        meal_allowance_snapshot=as_decimal(r["meal_allowance_snapshot"]),
        transport_allowance_snapshot=as_decimal(r["transport_allowance_snapshot"]),
        late_deduction_rate_snapshot=as_decimal(r["late_deduction_rate_snapshot"]),
        hourly_rate_snapshot=as_decimal(r["hourly_rate_snapshot"]),
        total_attendance=int(r.get("total_attendance") or 0),
        total_late_minutes=int(r.get("total_late_minutes") or 0),
        deductions=as_decimal(r.get("deductions")),
        net_salary=as_decimal(r.get("net_salary")),
        status=PayrollStatus(r["status"]),
        paid_at=r.get("paid_at"),
        payment_method=r.get("payment_method"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def get_for_update(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls WHERE payroll_id=%s FOR UPDATE", (int(payroll_id),))
            r = fetchone(cur)
            return _to_payroll(r) if r else None

    def create_draft_if_absent(
        self,
        *,
        employee_id: int,
        company_id: int,
        month: int,
        year: int,
        profile: SalaryProfile,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payrolls(
                    employee_id, company_id, month, year, basic_salary, allowances,
                    meal_allowance_snapshot, transport_allowance_snapshot,
                    late_deduction_rate_snapshot, hourly_rate_snapshot, net_salary, status
                )
                VALUES(%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 0, 'Draft')
                ON DUPLICATE KEY UPDATE payroll_id = payroll_id
                """,
                (
                    int(employee_id),
                    int(company_id),
                    int(month),
                    int(year),
                    profile.base_salary,
                    profile.allowance,
                    profile.meal_allowance,
                    profile.transport_allowance,
                    profile.late_deduction_per_min,
                    profile.hourly_rate,
                ),
            )
            # 1 = inserted, 0 = period already existed.
            return cur.rowcount == 1

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET total_attendance=%s, total_late_minutes=%s, deductions=%s, net_salary=%s, status=%s
                WHERE payroll_id=%s
                """,
                (int(total_attendance), int(total_late_minutes), deductions, net_salary, status.value, int(payroll_id)),
            )

    def set_status(
        self,
        *,
        payroll_id: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
        paid_at: Optional[datetime] = None,
        payment_method: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET status=%s, paid_at=%s, payment_method=%s
                WHERE payroll_id=%s AND status=%s
                """,
                (to_status.value, paid_at, payment_method, int(payroll_id), from_status.value),
            )
            return cur.rowcount > 0

    def transition_period(
        self,
        *,
        company_id: int,
        month: int,
        year: int,
        from_status: PayrollStatus,
        to_status: PayrollStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payrolls
                SET status=%s
                WHERE company_id=%s AND month=%s AND year=%s AND status=%s
                """,
                (to_status.value, int(company_id), int(month), int(year), from_status.value),
            )
            return int(cur.rowcount)

    def mark_paid(
        self,
        *,
        company_id: int,
        payroll_ids: Sequence[int],
        paid_at: datetime,
        payment_method: str,
    ) -> int:
        if not payroll_ids:
            return 0
        ids = [int(i) for i in payroll_ids]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE payrolls
                SET status='Paid', paid_at=%s, payment_method=%s
                WHERE company_id=%s AND status IN ('Review', 'Approved') AND payroll_id IN ({in_clause(ids)})
                """,
                (paid_at, payment_method, int(company_id), *ids),
            )
            return int(cur.rowcount)

    def delete_unless_paid(self, payroll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payrolls WHERE payroll_id=%s AND status <> 'Paid'", (int(payroll_id),))
            return cur.rowcount > 0

    def list_for_company(
        self,
        *,
        company_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> Sequence[PayrollRecord]:
        where = ["company_id=%s"]
        params: list = [int(company_id)]
        if month is not None:
            where.append("month=%s")
            params.append(int(month))
        if year is not None:
            where.append("year=%s")
            params.append(int(year))
        if status is not None:
            where.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payrolls WHERE {' AND '.join(where)} ORDER BY payroll_id DESC",
                tuple(params),
            )
            return [_to_payroll(r) for r in fetchall(cur)]

    def list_for_employee(self, *, employee_id: int, statuses: Sequence[PayrollStatus]) -> Sequence[PayrollRecord]:
        values = [s.value for s in statuses]
        if not values:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payrolls
                WHERE employee_id=%s AND status IN ({in_clause(values)})
                ORDER BY year DESC, month DESC
                """,
                (int(employee_id), *values),
            )
            return [_to_payroll(r) for r in fetchall(cur)]

    def paid_stats(self, company_id: int) -> PayrollStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS cnt, COALESCE(SUM(net_salary), 0) AS total
                FROM payrolls
                WHERE company_id=%s AND status='Paid'
                """,
                (int(company_id),),
            )
            r = fetchone(cur) or {}
            return PayrollStats(paid_count=int(r.get("cnt") or 0), total_paid=as_decimal(r.get("total")))

    def list_recent(self, *, limit: int) -> Sequence[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payrolls ORDER BY payroll_id DESC LIMIT %s", (int(limit),))
            return [_to_payroll(r) for r in fetchall(cur)]

    def summarize_period(self, *, company_id: int, month: int, year: int) -> Sequence[PeriodStatusTotal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT status, COUNT(*) AS cnt, COALESCE(SUM(net_salary), 0) AS total
                FROM payrolls
                WHERE company_id=%s AND month=%s AND year=%s
                GROUP BY status
                """,
                (int(company_id), int(month), int(year)),
            )
            return [
                PeriodStatusTotal(status=PayrollStatus(r["status"]), count=int(r["cnt"]), total_net=as_decimal(r["total"]))
                for r in fetchall(cur)
            ]
