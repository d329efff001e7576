from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of actor roles used for authorization."""

    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ContractType(str, Enum):
    PERMANENT = "Permanent"
    CONTRACT = "Contract"
    INTERN = "Intern"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    ON_TIME = "OnTime"
    LATE = "Late"
    ABSENT = "Absent"
    ANNUAL_LEAVE = "AnnualLeave"
    SICK = "Sick"
    MANUAL = "Manual"


# Statuses written by leave approval; clock events may not overwrite them.
LEAVE_STATUSES = frozenset({AttendanceStatus.ANNUAL_LEAVE, AttendanceStatus.SICK})

# Statuses that count as a paid day during payroll calculation.
COMPENSABLE_STATUSES = frozenset(
    {
        AttendanceStatus.ON_TIME,
        AttendanceStatus.LATE,
        AttendanceStatus.ANNUAL_LEAVE,
        AttendanceStatus.SICK,
    }
)


class ClockType(str, Enum):
    IN = "In"
    OUT = "Out"


class LeaveType(str, Enum):
    ANNUAL = "Annual"
    SICK = "Sick"
    OTHER = "Other"


class LeaveStatus(str, Enum):
    """Review workflow state of a leave request."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PayrollStatus(str, Enum):
    DRAFT = "Draft"
    REVIEW = "Review"
    APPROVED = "Approved"
    PAID = "Paid"


class SubscriptionStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    EXPIRED = "Expired"


class AuditAction(str, Enum):
    ATTENDANCE_CORRECTED = "ATTENDANCE_CORRECTED"
    LEAVE_APPROVED = "LEAVE_APPROVED"
    LEAVE_REJECTED = "LEAVE_REJECTED"
    PAYROLL_GENERATED = "PAYROLL_GENERATED"
    PAYROLL_CALCULATED = "PAYROLL_CALCULATED"
    PAYROLL_APPROVED = "PAYROLL_APPROVED"
    PAYROLL_PAID = "PAYROLL_PAID"
    PAYROLL_STATUS_CHANGED = "PAYROLL_STATUS_CHANGED"
    PAYROLL_DELETED = "PAYROLL_DELETED"
    SETTINGS_UPDATED = "SETTINGS_UPDATED"
    SALARY_PROFILE_SAVED = "SALARY_PROFILE_SAVED"
    LEAVE_QUOTA_UPDATED = "LEAVE_QUOTA_UPDATED"
