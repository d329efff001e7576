from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Holiday
from .repository import HolidayRepository


def _to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        company_id=int(r["company_id"]),
        holiday_date=r["holiday_date"],
        name=r["name"],
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_date(self, *, company_id: int, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, company_id, holiday_date, name
                FROM holidays
                WHERE company_id=%s AND holiday_date=%s
                """,
                (int(company_id), holiday_date),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def list_range(self, *, company_id: int, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, company_id, holiday_date, name
                FROM holidays
                WHERE company_id=%s AND holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date
                """,
                (int(company_id), start, end),
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def create(self, *, company_id: int, holiday_date: date, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(company_id, holiday_date, name)
                VALUES(%s, %s, %s)
                ON DUPLICATE KEY UPDATE name=VALUES(name), holiday_id=LAST_INSERT_ID(holiday_id)
                """,
                (int(company_id), holiday_date, name),
            )
            return int(cur.lastrowid)

    def delete(self, *, company_id: int, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM holidays WHERE holiday_id=%s AND company_id=%s",
                (int(holiday_id), int(company_id)),
            )
            return cur.rowcount > 0
