from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Iterable

import mysql.connector

from .connection import DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied to %s@%s/%s", target.user, target.host, target.database)


def ensure_demo_tenant(db_config: dict, *, timezone: str) -> int:
    """Create (or refresh) a demo company with an active subscription.

    Returns the demo company id.
    """

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT company_id FROM companies WHERE name=%s", ("PT Demo Indonesia",))
        row = cur.fetchone()
        if row:
            company_id = int(row["company_id"])
        else:
            cur.execute(
                """
                INSERT INTO companies(name, timezone, work_start_time, office_latitude, office_longitude, office_radius_m)
                VALUES(%s, %s, '08:00', -6.2088, 106.8456, 100)
                """,
                ("PT Demo Indonesia", timezone),
            )
            company_id = int(cur.lastrowid)

        cur.execute(
            """
            INSERT INTO subscriptions(company_id, plan_name, status, end_date, max_employees)
            VALUES(%s, 'Pro Plan', 'Active', %s, 50)
            ON DUPLICATE KEY UPDATE status='Active', end_date=VALUES(end_date)
            """,
            (company_id, datetime.now() + timedelta(days=30)),
        )

        cur.execute(
            """
            INSERT INTO salary_profiles(company_id, position_name, base_salary, allowance, meal_allowance,
                                        transport_allowance, hourly_rate, late_deduction_per_min)
            VALUES(%s, 'Staff', 5000000, 0, 20000, 15000, 30000, 1000)
            ON DUPLICATE KEY UPDATE position_id=LAST_INSERT_ID(position_id)
            """,
            (company_id,),
        )
        position_id = int(cur.lastrowid)

        def upsert_employee(full_name: str, email: str, role: str, position: int | None) -> None:
            cur.execute(
                """
                INSERT INTO employees(company_id, full_name, email, role, status, position_id, join_date)
                VALUES(%s, %s, %s, %s, 'Active', %s, %s)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), role=VALUES(role), status='Active'
                """,
                (company_id, full_name, email, role, position, date.today()),
            )

        upsert_employee("Admin Demo", "admin@demo.com", "admin", None)
        upsert_employee("Budi Santoso", "budi@demo.com", "employee", position_id)

        conn.commit()
        return company_id
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
