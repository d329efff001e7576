from __future__ import annotations

from flask import Flask, g

from ..common.web import json_body, ok, require, tenant_id
from ..core.permissions import Capability
from ..container import Container
from .service import AMOUNT_FIELDS


def register(app: Flask, container: Container) -> None:
    def _amounts(body: dict) -> dict:
        return {key: body.get(key) for key, _ in AMOUNT_FIELDS}

    @app.route("/api/positions", methods=["GET"], endpoint="position_list")
    @require(Capability.MANAGE_SALARY_PROFILES)
    def position_list():
        return ok(container.salary_profile_service.list_profiles(tenant_id(g.actor)))

    @app.route("/api/positions", methods=["POST"], endpoint="position_create")
    @require(Capability.MANAGE_SALARY_PROFILES)
    def position_create():
        body = json_body()
        profile = container.salary_profile_service.create_profile(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            position_name=body.get("position_name"),
            **_amounts(body),
        )
        return ok(profile, message="Position created", status=201)

    @app.route("/api/positions/<int:position_id>", methods=["PUT"], endpoint="position_update")
    @require(Capability.MANAGE_SALARY_PROFILES)
    def position_update(position_id: int):
        body = json_body()
        profile = container.salary_profile_service.update_profile(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            position_id=position_id,
            position_name=body.get("position_name"),
            **_amounts(body),
        )
        return ok(profile, message="Position updated")

    @app.route("/api/employees/<int:employee_id>/leave-quota", methods=["PUT"], endpoint="employee_leave_quota")
    @require(Capability.MANAGE_EMPLOYEES)
    def employee_leave_quota(employee_id: int):
        employee = container.employee_service.update_leave_quota(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            employee_id=employee_id,
            new_quota=json_body().get("annual_leave_quota"),
        )
        return ok(employee, message="Leave quota updated")
