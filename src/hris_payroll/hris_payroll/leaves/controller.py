from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import json_body, ok, require, tenant_id
from ..core.enums import Role
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _own_scope():
        # Employees only ever see their own requests.
        return g.actor.employee_id if g.actor.role == Role.EMPLOYEE else None

    @app.route("/api/leaves", methods=["POST"], endpoint="leave_submit")
    @require(Capability.REQUEST_LEAVE)
    def leave_submit():
        body = json_body()
        leave = container.leave_service.submit_leave_request(
            employee_id=g.actor.employee_id,
            leave_type=body.get("type"),
            start_date=parse_iso_date(body.get("start_date") or ""),
            end_date=parse_iso_date(body.get("end_date") or ""),
            reason=body.get("reason"),
        )
        return ok(leave, message="Leave request submitted", status=201)

    @app.route("/api/leaves", methods=["GET"], endpoint="leave_list")
    @require(Capability.VIEW_LEAVES)
    def leave_list():
        data = container.leave_service.list_leaves(
            company_id=tenant_id(g.actor),
            employee_id=_own_scope(),
            status=request.args.get("status"),
            leave_type=request.args.get("type"),
        )
        return ok(data)

    @app.route("/api/leaves/<int:leave_id>", methods=["GET"], endpoint="leave_detail")
    @require(Capability.VIEW_LEAVES)
    def leave_detail(leave_id: int):
        leave = container.leave_service.get_leave(leave_id, company_id=tenant_id(g.actor), employee_id=_own_scope())
        return ok(leave)

    @app.route("/api/leaves/quota", methods=["GET"], endpoint="leave_quota")
    @require(Capability.REQUEST_LEAVE)
    def leave_quota():
        return ok(container.leave_service.get_quota(g.actor.employee_id))

    @app.route("/api/leaves/<int:leave_id>", methods=["DELETE"], endpoint="leave_cancel")
    @require(Capability.REQUEST_LEAVE)
    def leave_cancel(leave_id: int):
        container.leave_service.cancel_leave_request(employee_id=g.actor.employee_id, request_id=leave_id)
        return ok(message="Leave request cancelled")

    @app.route("/api/leaves/<int:leave_id>/review", methods=["PUT"], endpoint="leave_review")
    @require(Capability.REVIEW_LEAVE)
    def leave_review(leave_id: int):
        body = json_body()
        leave = container.leave_service.review_leave_request(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            request_id=leave_id,
            decision=body.get("status"),
            rejected_reason=body.get("rejected_reason"),
        )
        return ok(leave, message=f"Leave request {leave.status.value.lower()}")

    @app.route("/api/leaves/active-today", methods=["GET"], endpoint="leave_active_today")
    @require(Capability.REVIEW_LEAVE)
    def leave_active_today():
        return ok(container.leave_service.active_leaves_today(tenant_id(g.actor)))

    @app.route("/api/leaves/stats", methods=["GET"], endpoint="leave_stats")
    @require(Capability.REVIEW_LEAVE)
    def leave_stats():
        return ok(container.leave_service.leave_stats(tenant_id(g.actor)))
