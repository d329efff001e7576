from __future__ import annotations

from typing import Optional

from ..core.enums import SubscriptionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Company, Subscription
from .repository import CompanyRepository, SubscriptionRepository


class MySQLCompanyRepository(CompanyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, company_id: int) -> Optional[Company]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT company_id, name, timezone, work_start_time,
                       office_latitude, office_longitude, office_radius_m
                FROM companies
                WHERE company_id=%s
                """,
                (int(company_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Company(
                company_id=int(r["company_id"]),
                name=r["name"],
                timezone=r["timezone"],
                work_start_time=r["work_start_time"],
                office_latitude=float(r["office_latitude"]) if r.get("office_latitude") is not None else None,
                office_longitude=float(r["office_longitude"]) if r.get("office_longitude") is not None else None,
                office_radius_m=int(r["office_radius_m"]) if r.get("office_radius_m") is not None else None,
            )

    def update_office(self, *, company_id: int, latitude: float, longitude: float, radius_m: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE companies
                SET office_latitude=%s, office_longitude=%s, office_radius_m=%s
                WHERE company_id=%s
                """,
                (latitude, longitude, int(radius_m), int(company_id)),
            )
            return cur.rowcount > 0

    def update_work_start(self, *, company_id: int, work_start_time: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE companies SET work_start_time=%s WHERE company_id=%s",
                (work_start_time, int(company_id)),
            )
            return cur.rowcount > 0


class MySQLSubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_company(self, company_id: int) -> Optional[Subscription]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT company_id, plan_name, status, end_date, max_employees
                FROM subscriptions
                WHERE company_id=%s
                """,
                (int(company_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Subscription(
                company_id=int(r["company_id"]),
                plan_name=r["plan_name"],
                status=SubscriptionStatus(r["status"]),
                end_date=r["end_date"],
                max_employees=int(r["max_employees"]),
            )
