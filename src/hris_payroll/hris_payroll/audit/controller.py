from __future__ import annotations

from flask import Flask, g, request

from ..common.web import int_arg, ok, require, tenant_id
from ..core.permissions import Capability
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/audit", methods=["GET"], endpoint="audit_list")
    @require(Capability.VIEW_AUDIT)
    def audit_list():
        page = container.audit_service.list_events(
            company_id=tenant_id(g.actor),
            action=request.args.get("action"),
            page=int_arg("page", 1),
            limit=int_arg("limit", 20),
        )
        return ok(page)
