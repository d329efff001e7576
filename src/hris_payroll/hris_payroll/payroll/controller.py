from __future__ import annotations

from flask import Flask, g, request
from werkzeug.exceptions import BadRequest

from ..common.web import int_arg, json_body, ok, require, tenant_id
from ..core.constants import GLOBAL_PAYROLL_LOG_LIMIT
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payroll/generate", methods=["POST"], endpoint="payroll_generate")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_generate():
        body = json_body()
        result = container.payroll_service.generate_payroll_period(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            month=body.get("month"),
            year=body.get("year"),
        )
        return ok(result, message=f"{result.created} payslip(s) prepared as Draft", status=201)

    @app.route("/api/payroll/<int:payroll_id>/calculate", methods=["POST"], endpoint="payroll_calculate")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_calculate(payroll_id: int):
        record = container.payroll_service.calculate_payroll(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            payroll_id=payroll_id,
        )
        return ok(record, message="Payroll calculated")

    @app.route("/api/payroll/approve-all", methods=["POST"], endpoint="payroll_approve_all")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_approve_all():
        body = json_body()
        count = container.payroll_service.approve_all_monthly(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            month=body.get("month"),
            year=body.get("year"),
        )
        return ok({"approved": count}, message=f"{count} payroll(s) approved")

    @app.route("/api/payroll/bulk-payment", methods=["POST"], endpoint="payroll_bulk_payment")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_bulk_payment():
        ids = json_body().get("payroll_ids")
        if not isinstance(ids, list):
            raise BadRequest("payroll_ids must be a list")
        count = container.payroll_service.record_bulk_payment(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            payroll_ids=ids,
        )
        return ok({"paid": count}, message=f"{count} payroll(s) marked as paid")

    @app.route("/api/payroll/<int:payroll_id>/status", methods=["PUT"], endpoint="payroll_update_status")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_update_status(payroll_id: int):
        record = container.payroll_service.update_status(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            payroll_id=payroll_id,
            status=json_body().get("status"),
        )
        return ok(record)

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="payroll_delete")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_delete(payroll_id: int):
        container.payroll_service.delete_payroll(
            actor_id=g.actor.employee_id,
            company_id=tenant_id(g.actor),
            payroll_id=payroll_id,
        )
        return ok(message="Payroll deleted")

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_list")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_list():
        data = container.payroll_service.list_payrolls(
            company_id=tenant_id(g.actor),
            month=int_arg("month"),
            year=int_arg("year"),
            status=request.args.get("status"),
        )
        return ok(data)

    @app.route("/api/payroll/stats", methods=["GET"], endpoint="payroll_stats")
    @require(Capability.MANAGE_PAYROLL)
    def payroll_stats():
        return ok(container.payroll_service.payroll_stats(tenant_id(g.actor)))

    @app.route("/api/payroll/global-logs", methods=["GET"], endpoint="payroll_global_logs")
    @require(Capability.VIEW_GLOBAL_PAYROLL_LOG)
    def payroll_global_logs():
        limit = int_arg("limit", GLOBAL_PAYROLL_LOG_LIMIT)
        return ok(container.payroll_service.list_recent_global(limit=limit))

    @app.route("/api/payroll/me", methods=["GET"], endpoint="payroll_my_payslips")
    @require(Capability.VIEW_OWN_PAYSLIP)
    def payroll_my_payslips():
        return ok(container.payroll_service.my_payslips(g.actor.employee_id))

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_detail")
    @require(Capability.VIEW_OWN_PAYSLIP)
    def payroll_detail(payroll_id: int):
        return ok(container.payroll_service.get_payroll_detail(payroll_id, g.actor))
