from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .model import SalaryProfile
from .repository import SalaryProfileRepository

_COLUMNS = """
    position_id, company_id, position_name, base_salary, allowance, meal_allowance,
    transport_allowance, hourly_rate, late_deduction_per_min
"""


def _to_profile(r: dict) -> SalaryProfile:
    return SalaryProfile(
        position_id=int(r["position_id"]),
        company_id=int(r["company_id"]),
        position_name=r["position_name"],
        base_salary=as_decimal(r["base_salary"]),
        allowance=as_decimal(r.get("allowance")),
        meal_allowance=as_decimal(r.get("meal_allowance")),
        transport_allowance=as_decimal(r.get("transport_allowance")),
        hourly_rate=as_decimal(r.get("hourly_rate")),
        late_deduction_per_min=as_decimal(r.get("late_deduction_per_min")),
    )


class MySQLSalaryProfileRepository(SalaryProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, position_id: int) -> Optional[SalaryProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM salary_profiles WHERE position_id=%s", (int(position_id),))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_by_name(self, *, company_id: int, position_name: str) -> Optional[SalaryProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_profiles WHERE company_id=%s AND position_name=%s",
                (int(company_id), position_name),
            )
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def list_for_company(self, company_id: int) -> Sequence[SalaryProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM salary_profiles WHERE company_id=%s ORDER BY position_name",
                (int(company_id),),
            )
            return [_to_profile(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO salary_profiles(company_id, position_name, base_salary, allowance, meal_allowance,
                                            transport_allowance, hourly_rate, late_deduction_per_min)
                VALUES(%s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    int(company_id),
                    position_name,
                    base_salary,
                    allowance,
                    meal_allowance,
                    transport_allowance,
                    hourly_rate,
                    late_deduction_per_min,
                ),
            )
            return int(cur.lastrowid)

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE salary_profiles
                SET position_name=%s, base_salary=%s, allowance=%s, meal_allowance=%s,
                    transport_allowance=%s, hourly_rate=%s, late_deduction_per_min=%s
                WHERE position_id=%s
                """,
                (
                    position_name,
                    base_salary,
                    allowance,
                    meal_allowance,
                    transport_allowance,
                    hourly_rate,
                    late_deduction_per_min,
                    int(position_id),
                ),
            )
            return cur.rowcount > 0
