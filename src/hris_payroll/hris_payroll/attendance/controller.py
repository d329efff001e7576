from __future__ import annotations

from datetime import timedelta

from flask import Flask, g, request
from werkzeug.exceptions import BadRequest

from ..common.datetime_utils import parse_hhmm
from ..common.web import date_arg, int_arg, json_body, ok, require, tenant_id
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _coordinates(body: dict):
        lat, lon = body.get("latitude"), body.get("longitude")
        if lat is None and lon is None:
            return None
        return lat, lon

    def _optional_time(value):
        return parse_hhmm(value) if value else None

    @app.route("/api/attendance/clock", methods=["POST"], endpoint="attendance_clock")
    @require(Capability.CLOCK)
    def attendance_clock():
        body = json_body()
        record = container.attendance_service.record_clock_event(
            g.actor.employee_id,
            body.get("type") or "",
            coordinates=_coordinates(body),
            device_info=body.get("device_info") or request.headers.get("User-Agent"),
        )
        message = "Clock-in recorded" if record.clock_out is None else "Clock-out recorded"
        return ok(record, message=message)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @require(Capability.VIEW_OWN_ATTENDANCE)
    def attendance_today():
        return ok(container.attendance_service.get_today(g.actor.employee_id) or {})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @require(Capability.VIEW_OWN_ATTENDANCE)
    def attendance_history():
        limit = int_arg("limit", 30)
        return ok(container.attendance_service.get_history(g.actor.employee_id, limit=limit))

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @require(Capability.MANAGE_ATTENDANCE)
    def attendance_list():
        company_id = tenant_id(g.actor)
        today = container.attendance_service.company_today(company_id)
        start = date_arg("start", today - timedelta(days=7))
        end = date_arg("end", today)
        rows = container.attendance_service.list_company_attendance(
            company_id=company_id,
            start=start,
            end=end,
            employee_id=int_arg("employee_id"),
        )
        return ok(rows)

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_correct")
    @require(Capability.MANAGE_ATTENDANCE)
    def attendance_correct(attendance_id: int):
        body = json_body()
        record = container.attendance_service.correct_attendance(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            attendance_id=attendance_id,
            status=body.get("status"),
            reason=body.get("reason") or "",
            clock_in=_optional_time(body.get("clock_in")),
            clock_out=_optional_time(body.get("clock_out")),
        )
        return ok(record, message="Attendance updated")

    @app.route("/api/attendance/bulk-status", methods=["POST"], endpoint="attendance_bulk_status")
    @require(Capability.MANAGE_ATTENDANCE)
    def attendance_bulk_status():
        body = json_body()
        ids = body.get("attendance_ids")
        if not isinstance(ids, list):
            raise BadRequest("attendance_ids must be a list")
        count = container.attendance_service.bulk_correct_status(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            attendance_ids=ids,
            status=body.get("status"),
            reason=body.get("reason") or "",
        )
        return ok({"updated": count}, message=f"{count} attendance record(s) updated")
