from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ContractType, EmployeeStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, company_id, full_name, email, role, status, position_id,
    annual_leave_quota, leave_balance, join_date, contract_type
"""


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]) if r.get("company_id") is not None else None,
        full_name=r["full_name"],
        email=r["email"],
        role=Role(r["role"]),
        status=EmployeeStatus(r["status"]),
        position_id=int(r["position_id"]) if r.get("position_id") is not None else None,
        annual_leave_quota=int(r.get("annual_leave_quota") or 0),
        leave_balance=int(r.get("leave_balance") or 0),
        join_date=r.get("join_date"),
        contract_type=ContractType(r.get("contract_type") or ContractType.CONTRACT.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list_payroll_eligible(self, company_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE company_id=%s AND role='employee' AND status='Active' AND position_id IS NOT NULL
                ORDER BY employee_id
                """,
                (int(company_id),),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def decrement_leave_balance(self, *, employee_id: int, days: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET leave_balance = leave_balance - %s
                WHERE employee_id=%s AND leave_balance >= %s
                """,
                (int(days), int(employee_id), int(days)),
            )
            return cur.rowcount > 0

    def set_leave_quota(self, *, employee_id: int, quota: int, balance_delta: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET annual_leave_quota=%s, leave_balance = GREATEST(leave_balance + %s, 0)
                WHERE employee_id=%s
                """,
                (int(quota), int(balance_delta), int(employee_id)),
            )
            return cur.rowcount > 0
