from __future__ import annotations

from flask import Flask, g

from ..common.web import date_arg, int_arg, ok, require, tenant_id
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/attendance", methods=["GET"], endpoint="report_attendance")
    @require(Capability.VIEW_REPORTS)
    def report_attendance():
        company_id = tenant_id(g.actor)
        today = container.attendance_service.company_today(company_id)
        summary = container.reporting_service.attendance_summary(
            company_id=company_id,
            start=date_arg("start", today.replace(day=1)),
            end=date_arg("end", today),
            employee_id=int_arg("employee_id"),
        )
        return ok(summary)

    @app.route("/api/reports/payroll", methods=["GET"], endpoint="report_payroll")
    @require(Capability.VIEW_REPORTS)
    def report_payroll():
        summary = container.reporting_service.payroll_summary(
            company_id=tenant_id(g.actor),
            month=int_arg("month"),
            year=int_arg("year"),
        )
        return ok(summary)

    @app.route("/api/reports/payroll.csv", methods=["GET"], endpoint="report_payroll_csv")
    @require(Capability.VIEW_REPORTS)
    def report_payroll_csv():
        month, year = int_arg("month"), int_arg("year")
        text = container.reporting_service.payroll_csv(company_id=tenant_id(g.actor), month=month, year=year)
        filename = f"payroll_{year}{int(month):02d}.csv"
        return app.response_class(
            text.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/dashboard/employee", methods=["GET"], endpoint="dashboard_employee")
    @require(Capability.VIEW_OWN_ATTENDANCE)
    def dashboard_employee():
        today = container.attendance_service.company_today(tenant_id(g.actor))
        return ok(container.reporting_service.employee_dashboard(g.actor.employee_id, today))
