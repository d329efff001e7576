from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(self, *, employee_id: int, start: datetime, end: datetime) -> Optional[LeaveRequest]:
        """First Pending/Approved request of the employee intersecting [start, end]."""

        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        company_id: int,
        leave_type: LeaveType,
        start: datetime,
        end: datetime,
        days_taken: int,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def set_status_if_pending(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        reviewed_by: int,
        reviewed_at: datetime,
        rejected_reason: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_pending(self, *, leave_id: int, employee_id: int) -> bool:
        raise NotImplementedError

    def list_for_company(
        self,
        *,
        company_id: int,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_approved_on(self, *, company_id: int, day: date) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def count_by_status(self, company_id: int) -> dict[LeaveStatus, int]:
        raise NotImplementedError
