from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.constants import LEAVE_ATTENDANCE_TYPE, MANUAL_ATTENDANCE_TYPE
from ..core.enums import COMPENSABLE_STATUSES, AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, AttendanceTotals, StatusSummary
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, company_id, work_date, clock_in, clock_out, status,
    is_late, late_duration_minutes, work_hours, location_in, location_out, device_info,
    attendance_type, note, leave_id, is_payroll_processed, payroll_id
"""

# A clock-in may only fill a row that has no clock-in yet, is not locked by
# payroll and is not a leave day.
_CAN_CLOCK_IN = "clock_in IS NULL AND is_payroll_processed = 0 AND status NOT IN ('AnnualLeave', 'Sick')"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        company_id=int(r["company_id"]),
        work_date=r["work_date"],
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        status=AttendanceStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        late_duration_minutes=int(r.get("late_duration_minutes") or 0),
        work_hours=as_decimal(r["work_hours"]) if r.get("work_hours") is not None else None,
        location_in=r.get("location_in"),
        location_out=r.get("location_out"),
        device_info=r.get("device_info"),
        attendance_type=r.get("attendance_type"),
        note=r.get("note"),
        leave_id=int(r["leave_id"]) if r.get("leave_id") is not None else None,
        is_payroll_processed=bool(r.get("is_payroll_processed")),
        payroll_id=int(r["payroll_id"]) if r.get("payroll_id") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_recent_for_employee(self, employee_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(employee_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_company(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        where = ["company_id=%s", "work_date BETWEEN %s AND %s"]
        params: list = [int(company_id), start, end]
        if employee_id is not None:
            where.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {' AND '.join(where)}
                ORDER BY work_date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def claim_clock_in(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        clock_in: datetime,
        status: AttendanceStatus,
        is_late: bool,
        late_minutes: int,
        location: Optional[str],
        device_info: Optional[str],
    ) -> bool:
        # clock_in is assigned last: MySQL evaluates the SET list left to
        # right, so the guard must still see the old value for every column.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendance_records(
                    employee_id, company_id, work_date, clock_in, status, is_late,
                    late_duration_minutes, location_in, device_info
                )
                VALUES(%s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    status = IF({_CAN_CLOCK_IN}, VALUES(status), status),
                    is_late = IF({_CAN_CLOCK_IN}, VALUES(is_late), is_late),
                    late_duration_minutes = IF({_CAN_CLOCK_IN}, VALUES(late_duration_minutes), late_duration_minutes),
                    location_in = IF({_CAN_CLOCK_IN}, VALUES(location_in), location_in),
                    device_info = IF({_CAN_CLOCK_IN}, VALUES(device_info), device_info),
                    clock_in = IF({_CAN_CLOCK_IN}, VALUES(clock_in), clock_in)
                """,
                (
                    int(employee_id),
                    int(company_id),
                    work_date,
                    clock_in,
                    status.value,
                    1 if is_late else 0,
                    int(late_minutes),
                    location,
                    device_info,
                ),
            )
            # 1 = inserted, 2 = filled an existing row, 0 = guard refused.
            return cur.rowcount > 0

    def record_clock_out(
        self,
        *,
        attendance_id: int,
        clock_out: datetime,
        work_hours: Decimal,
        location: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_out=%s, work_hours=%s, location_out=%s
                WHERE attendance_id=%s
                  AND clock_in IS NOT NULL
                  AND clock_out IS NULL
                  AND is_payroll_processed = 0
                """,
                (clock_out, work_hours, location, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert_leave_day(
        self,
        *,
        employee_id: int,
        company_id: int,
        work_date: date,
        status: AttendanceStatus,
        leave_id: int,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, company_id, work_date, status, attendance_type, leave_id
                )
                VALUES(%s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    is_late = IF(is_payroll_processed = 0, 0, is_late),
                    late_duration_minutes = IF(is_payroll_processed = 0, 0, late_duration_minutes),
                    attendance_type = IF(is_payroll_processed = 0, VALUES(attendance_type), attendance_type),
                    leave_id = IF(is_payroll_processed = 0, VALUES(leave_id), leave_id),
                    status = IF(is_payroll_processed = 0, VALUES(status), status)
                """,
                (int(employee_id), int(company_id), work_date, status.value, LEAVE_ATTENDANCE_TYPE, int(leave_id)),
            )

    def correct(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        is_late: bool,
        late_minutes: int,
        work_hours: Optional[Decimal],
        note: str,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, clock_in=%s, clock_out=%s, is_late=%s, late_duration_minutes=%s,
                    work_hours=%s, note=%s, attendance_type=%s
                WHERE attendance_id=%s AND is_payroll_processed = 0
                """,
                (
                    status.value,
                    clock_in,
                    clock_out,
                    1 if is_late else 0,
                    int(late_minutes),
                    work_hours,
                    note,
                    MANUAL_ATTENDANCE_TYPE,
                    int(attendance_id),
                ),
            )
            return cur.rowcount > 0

    def find_locked_dates(self, *, employee_id: int, days: Sequence[date]) -> list[date]:
        if not days:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT work_date
                FROM attendance_records
                WHERE employee_id=%s AND is_payroll_processed = 1 AND work_date IN ({in_clause(days)})
                ORDER BY work_date
                FOR UPDATE
                """,
                (int(employee_id), *days),
            )
            return [r["work_date"] for r in fetchall(cur)]

    def totals_for_payroll(self, *, employee_id: int, start: date, end: date) -> AttendanceTotals:
        statuses = sorted(s.value for s in COMPENSABLE_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total_attendance,
                       COALESCE(SUM(late_duration_minutes), 0) AS total_late_minutes
                FROM attendance_records
                WHERE employee_id=%s
                  AND work_date BETWEEN %s AND %s
                  AND status IN ({in_clause(statuses)})
                """,
                (int(employee_id), start, end, *statuses),
            )
            r = fetchone(cur) or {}
            return AttendanceTotals(
                total_attendance=int(r.get("total_attendance") or 0),
                total_late_minutes=int(r.get("total_late_minutes") or 0),
            )

    def lock_range(self, *, employee_id: int, start: date, end: date, payroll_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET is_payroll_processed = 1, payroll_id=%s
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                """,
                (int(payroll_id), int(employee_id), start, end),
            )
            return int(cur.rowcount)

    def unlock_for_payroll(self, payroll_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET is_payroll_processed = 0, payroll_id = NULL
                WHERE payroll_id=%s
                """,
                (int(payroll_id),),
            )
            return int(cur.rowcount)

    def summarize_by_status(
        self,
        *,
        company_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[StatusSummary]:
        where = ["company_id=%s", "work_date BETWEEN %s AND %s"]
        params: list = [int(company_id), start, end]
        if employee_id is not None:
            where.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS cnt, COALESCE(SUM(work_hours), 0) AS hours
                FROM attendance_records
                WHERE {' AND '.join(where)}
                GROUP BY status
                """,
                tuple(params),
            )
            return [
                StatusSummary(status=AttendanceStatus(r["status"]), count=int(r["cnt"]), work_hours=as_decimal(r["hours"]))
                for r in fetchall(cur)
            ]
