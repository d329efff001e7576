"""Role → capability table.

Controllers check one capability per request; services never look at role
strings directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError


class Capability(str, Enum):
    CLOCK = "clock"
    VIEW_OWN_ATTENDANCE = "view_own_attendance"
    MANAGE_ATTENDANCE = "manage_attendance"
    REQUEST_LEAVE = "request_leave"
    VIEW_LEAVES = "view_leaves"
    REVIEW_LEAVE = "review_leave"
    MANAGE_PAYROLL = "manage_payroll"
    VIEW_OWN_PAYSLIP = "view_own_payslip"
    VIEW_REPORTS = "view_reports"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_SALARY_PROFILES = "manage_salary_profiles"
    MANAGE_EMPLOYEES = "manage_employees"
    VIEW_AUDIT = "view_audit"
    VIEW_GLOBAL_PAYROLL_LOG = "view_global_payroll_log"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.EMPLOYEE: frozenset(
        {
            Capability.CLOCK,
            Capability.VIEW_OWN_ATTENDANCE,
            Capability.REQUEST_LEAVE,
            Capability.VIEW_LEAVES,
            Capability.VIEW_OWN_PAYSLIP,
        }
    ),
    Role.ADMIN: frozenset(
        {
            Capability.VIEW_OWN_ATTENDANCE,
            Capability.MANAGE_ATTENDANCE,
            Capability.VIEW_LEAVES,
            Capability.REVIEW_LEAVE,
            Capability.MANAGE_PAYROLL,
            Capability.VIEW_OWN_PAYSLIP,
            Capability.VIEW_REPORTS,
            Capability.MANAGE_SETTINGS,
            Capability.MANAGE_SALARY_PROFILES,
            Capability.MANAGE_EMPLOYEES,
            Capability.VIEW_AUDIT,
        }
    ),
    Role.SUPERADMIN: frozenset(Capability),
}


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a request."""

    employee_id: int
    company_id: Optional[int]
    role: Role

    def can(self, capability: Capability) -> bool:
        return capability in ROLE_CAPABILITIES.get(self.role, frozenset())


def ensure_capability(actor: Actor, capability: Capability) -> None:
    if not actor.can(capability):
        raise AuthorizationError("You do not have permission to perform this action")
