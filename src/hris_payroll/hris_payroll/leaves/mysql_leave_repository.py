from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import end_of_day, start_of_day
from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    leave_id, employee_id, company_id, leave_type, start_date, end_date, days_taken, status,
    reason, rejected_reason, reviewed_by, reviewed_at, created_at
"""


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days_taken=int(r["days_taken"]),
        status=LeaveStatus(r["status"]),
        reason=r.get("reason"),
        rejected_reason=r.get("rejected_reason"),
        reviewed_by=int(r["reviewed_by"]) if r.get("reviewed_by") is not None else None,
        reviewed_at=r.get("reviewed_at"),
        created_at=r.get("created_at"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def find_overlapping(self, *, employee_id: int, start: datetime, end: datetime) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE employee_id=%s
                  AND status IN ('Pending', 'Approved')
                  AND start_date <= %s
                  AND end_date >= %s
                ORDER BY start_date
                LIMIT 1
                """,
                (int(employee_id), end, start),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        leave_type: LeaveType,
        start: datetime,
        end: datetime,
        days_taken: int,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(employee_id, company_id, leave_type, start_date, end_date, days_taken, reason, status)
                VALUES(%s, %s, %s, %s, %s, %s, %s, 'Pending')
                """,
                (int(employee_id), int(company_id), leave_type.value, start, end, int(days_taken), reason),
            )
            return int(cur.lastrowid)

    def set_status_if_pending(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        rejected_reason: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, reviewed_by=%s, reviewed_at=%s, rejected_reason=%s
                WHERE leave_id=%s AND status='Pending'
                """,
                (status.value, int(reviewed_by), reviewed_at, rejected_reason, int(leave_id)),
            )
            return cur.rowcount > 0

    def delete_pending(self, *, leave_id: int, employee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_requests WHERE leave_id=%s AND employee_id=%s AND status='Pending'",
                (int(leave_id), int(employee_id)),
            )
            return cur.rowcount > 0

    def list_for_company(
        self,
        *,
        company_id: int,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        where = ["company_id=%s"]
        params: list = [int(company_id)]
        if employee_id is not None:
            where.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            where.append("status=%s")
            params.append(status.value)
        if leave_type is not None:
            where.append("leave_type=%s")
            params.append(leave_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {' AND '.join(where)}
                ORDER BY created_at DESC, leave_id DESC
                """,
                tuple(params),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_approved_on(self, *, company_id: int, day: date) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE company_id=%s AND status='Approved' AND start_date <= %s AND end_date >= %s
                ORDER BY employee_id
                """,
                (int(company_id), end_of_day(day), start_of_day(day)),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def count_by_status(self, company_id: int) -> dict[LeaveStatus, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT status, COUNT(*) AS cnt FROM leave_requests WHERE company_id=%s GROUP BY status",
                (int(company_id),),
            )
            return {LeaveStatus(r["status"]): int(r["cnt"]) for r in fetchall(cur)}
