from __future__ import annotations

from datetime import date

from flask import Flask, g

from ..common.datetime_utils import parse_iso_date
from ..common.web import date_arg, json_body, ok, require, tenant_id
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/company/settings", methods=["GET"], endpoint="company_settings")
    @require(Capability.MANAGE_SETTINGS)
    def company_settings():
        return ok(container.settings_service.get_company(tenant_id(g.actor)))

    @app.route("/api/company/settings/office", methods=["PUT"], endpoint="company_settings_office")
    @require(Capability.MANAGE_SETTINGS)
    def company_settings_office():
        body = json_body()
        company = container.settings_service.update_office_settings(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            radius_m=body.get("radius_m"),
        )
        return ok(company, message="Office location updated")

    @app.route("/api/company/settings/time", methods=["PUT"], endpoint="company_settings_time")
    @require(Capability.MANAGE_SETTINGS)
    def company_settings_time():
        company = container.settings_service.update_time_settings(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            work_start_time=json_body().get("work_start_time"),
        )
        return ok(company, message="Work start time updated")

    @app.route("/api/company/subscription", methods=["GET"], endpoint="company_subscription")
    @require(Capability.MANAGE_SETTINGS)
    def company_subscription():
        company_id = tenant_id(g.actor)
        gate = container.subscription_gate
        return ok({"active": gate.is_active(company_id), "end_date": gate.expiry(company_id)})

    @app.route("/api/holidays", methods=["GET"], endpoint="holiday_list")
    @require(Capability.VIEW_LEAVES)
    def holiday_list():
        company_id = tenant_id(g.actor)
        year = container.attendance_service.company_today(company_id).year
        holidays = container.holiday_calendar.list_holidays(
            company_id,
            date_arg("start", date(year, 1, 1)),
            date_arg("end", date(year, 12, 31)),
        )
        return ok(holidays)

    @app.route("/api/holidays", methods=["POST"], endpoint="holiday_add")
    @require(Capability.MANAGE_SETTINGS)
    def holiday_add():
        body = json_body()
        holiday_id = container.holiday_calendar.add_holiday(
            company_id=tenant_id(g.actor),
            holiday_date=parse_iso_date(body.get("date") or ""),
            name=body.get("name"),
        )
        return ok({"holiday_id": holiday_id}, message="Holiday added", status=201)

    @app.route("/api/holidays/<int:holiday_id>", methods=["DELETE"], endpoint="holiday_remove")
    @require(Capability.MANAGE_SETTINGS)
    def holiday_remove(holiday_id: int):
        container.holiday_calendar.remove_holiday(company_id=tenant_id(g.actor), holiday_id=holiday_id)
        return ok(message="Holiday removed")
