from __future__ import annotations

import logging
from typing import Any, Optional

from ..audit.service import AuditService
from ..common.validators import require_non_empty, require_non_negative_money
from ..core.enums import AuditAction
from ..core.exceptions import NotFoundError, ValidationError
from .model import Employee, SalaryProfile
from .repository import EmployeeRepository, SalaryProfileRepository

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = (
    ("base_salary", "Base salary"),
    ("allowance", "Allowance"),
    ("meal_allowance", "Meal allowance"),
    ("transport_allowance", "Transport allowance"),
    ("hourly_rate", "Hourly rate"),
    ("late_deduction_per_min", "Late deduction per minute"),
)


class SalaryProfileService:
    """Named positions and their salary parameters (per tenant)."""

    def __init__(self, profiles: SalaryProfileRepository, audit: AuditService):
        self._profiles = profiles
        self._audit = audit

    def get_profile(self, position_id: int) -> Optional[SalaryProfile]:
        return self._profiles.get_by_id(int(position_id))

    def list_profiles(self, company_id: int) -> list[SalaryProfile]:
        return list(self._profiles.list_for_company(int(company_id)))

    @staticmethod
    def _clean_amounts(values: dict[str, Any]) -> dict[str, Any]:
        return {key: require_non_negative_money(values.get(key), label) for key, label in AMOUNT_FIELDS}

    def create_profile(self, *, actor_id: int, company_id: int, position_name: str, **amounts: Any) -> SalaryProfile:
        name = require_non_empty(position_name, "Position name")
        cleaned = self._clean_amounts(amounts)
        if self._profiles.get_by_name(company_id=int(company_id), position_name=name):
            raise ValidationError(f"Position {name!r} already exists")

        position_id = self._profiles.create(company_id=int(company_id), position_name=name, **cleaned)
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.SALARY_PROFILE_SAVED,
            target=f"position:{position_id}",
            details={"position_name": name, **{k: str(v) for k, v in cleaned.items()}},
        )
        logger.info("Salary profile %s created for company %s", name, company_id)
        return self._profiles.get_by_id(position_id)

    def update_profile(
        self,
        *,
        actor_id: int,
        company_id: int,
        position_id: int,
        position_name: str,
        **amounts: Any,
    ) -> SalaryProfile:
        current = self._profiles.get_by_id(int(position_id))
        if not current or current.company_id != int(company_id):
            raise NotFoundError("Position not found")

        name = require_non_empty(position_name, "Position name")
        cleaned = self._clean_amounts(amounts)
        clash = self._profiles.get_by_name(company_id=int(company_id), position_name=name)
        if clash and clash.position_id != current.position_id:
            raise ValidationError(f"Position {name!r} already exists")

        self._profiles.update(position_id=current.position_id, position_name=name, **cleaned)
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.SALARY_PROFILE_SAVED,
            target=f"position:{current.position_id}",
            details={"position_name": name, **{k: str(v) for k, v in cleaned.items()}},
        )
        return self._profiles.get_by_id(current.position_id)


class EmployeeService:
    def __init__(self, employees: EmployeeRepository, audit: AuditService):
        self._employees = employees
        self._audit = audit

    def get_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update_leave_quota(self, *, actor_id: int, company_id: int, employee_id: int, new_quota: Any) -> Employee:
        """Change the annual quota; the balance moves by the same difference."""

        try:
            quota = int(new_quota)
        except (TypeError, ValueError):
            raise ValidationError("Leave quota must be an integer")
        if quota < 0:
            raise ValidationError("Leave quota must not be negative")

        employee = self.get_employee(employee_id)
        if employee.company_id != int(company_id):
            raise NotFoundError("Employee not found")

        delta = quota - employee.annual_leave_quota
        self._employees.set_leave_quota(employee_id=employee.employee_id, quota=quota, balance_delta=delta)
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.LEAVE_QUOTA_UPDATED,
            target=f"employee:{employee.employee_id}",
            details={"old_quota": employee.annual_leave_quota, "new_quota": quota},
        )
        return self.get_employee(employee.employee_id)
