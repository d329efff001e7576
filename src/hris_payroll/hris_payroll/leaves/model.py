from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    company_id: int
    leave_type: LeaveType
    start_date: datetime
    end_date: datetime
    days_taken: int
    status: LeaveStatus
    reason: Optional[str] = None
    rejected_reason: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def attendance_status(self) -> AttendanceStatus:
        """Status written to attendance days when the request is approved."""
        if self.leave_type == LeaveType.SICK:
            return AttendanceStatus.SICK
        return AttendanceStatus.ANNUAL_LEAVE


@dataclass(frozen=True)
class LeaveQuota:
    annual_leave_quota: int
    leave_balance: int

    @property
    def taken(self) -> int:
        return max(self.annual_leave_quota - self.leave_balance, 0)


@dataclass(frozen=True)
class LeaveStats:
    pending: int
    approved: int
