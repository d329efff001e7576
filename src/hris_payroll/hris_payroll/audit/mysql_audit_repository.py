from __future__ import annotations

import json
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AuditEvent
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, event: AuditEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_logs(actor_id, company_id, action, target, details, created_at)
                VALUES(%s, %s, %s, %s, %s, %s)
                """,
                (
                    event.actor_id,
                    event.company_id,
                    event.action,
                    event.target,
                    json.dumps(event.details, default=str),
                    event.created_at,
                ),
            )
            return int(cur.lastrowid)

    def list_for_company(
        self,
        *,
        company_id: int,
        action: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Sequence[AuditEvent]:
        clauses = ["company_id=%s"]
        params: list[object] = [int(company_id)]
        if action:
            clauses.append("action=%s")
            params.append(action)
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT audit_id, actor_id, company_id, action, target, details, created_at
                FROM audit_logs
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, audit_id DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params),
            )
            return [
                AuditEvent(
                    audit_id=int(r["audit_id"]),
                    actor_id=r.get("actor_id"),
                    company_id=r.get("company_id"),
                    action=r["action"],
                    target=r["target"],
                    details=json.loads(r["details"]) if r.get("details") else {},
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def count_for_company(self, *, company_id: int, action: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) AS total FROM audit_logs WHERE company_id=%s"
        params: list[object] = [int(company_id)]
        if action:
            sql += " AND action=%s"
            params.append(action)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
