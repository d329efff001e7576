"""Shared helpers for the JSON controllers."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import BadRequest, HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StateConflict,
    SubscriptionExpired,
)
from ..core.permissions import Actor, Capability, ensure_capability
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)


def to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
        # Read-model properties are part of the payload too.
        for name, attr in vars(type(value)).items():
            if isinstance(attr, property):
                data[name] = to_jsonable(getattr(value, name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(to_jsonable(k)): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = to_jsonable(data)
    return jsonify(payload), status


def _error(message: str, code: str, status: int, **extra: Any):
    payload = {"success": False, "message": message, "code": code}
    payload.update(extra)
    return jsonify(payload), status


def status_for(error: DomainError) -> int:
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, (AuthorizationError, SubscriptionExpired)):
        return 403
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, StateConflict):
        return 409
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        extra = {}
        if hasattr(e, "distance_m"):
            extra = {"distance_m": round(e.distance_m, 1), "radius_m": e.radius_m}
        return _error(str(e), e.code, status_for(e), **extra)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _error(e.description or e.name, e.name.upper().replace(" ", "_"), e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _error("Internal server error", "INTERNAL_ERROR", 500)


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Please sign in to continue")
    try:
        role = Role(session.get("role"))
    except ValueError:
        raise AuthenticationError("Session role is invalid")
    company_id = session.get("company_id")
    return Actor(
        employee_id=int(session["user_id"]),
        company_id=int(company_id) if company_id is not None else None,
        role=role,
    )


def require(capability: Capability):
    """Decorator: authenticated actor holding ``capability``, exposed as ``g.actor``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            actor = current_actor()
            ensure_capability(actor, capability)
            g.actor = actor
            return view(*args, **kwargs)

        return wrapper

    return decorator


def tenant_id(actor: Actor) -> int:
    """Company scope of the request; superadmins pass ``company_id`` explicitly."""
    if actor.role == Role.SUPERADMIN:
        raw = request.args.get("company_id") or json_body().get("company_id")
        if raw is None:
            raise BadRequest("company_id is required")
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise BadRequest("company_id must be an integer")
    if actor.company_id is None:
        raise AuthorizationError("You are not assigned to a company")
    return actor.company_id


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def date_arg(name: str, default: date) -> date:
    value = request.args.get(name)
    return parse_iso_date(value) if value else default


def int_arg(name: str, default: Optional[int] = None) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"{name} must be an integer")
