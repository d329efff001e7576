from __future__ import annotations

from dataclasses import dataclass

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.service import AuditService
from .companies.mysql_company_repository import MySQLCompanyRepository, MySQLSubscriptionRepository
from .companies.mysql_holiday_repository import MySQLHolidayRepository
from .companies.service import CompanySettingsService, HolidayCalendar, SubscriptionGate
from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.mysql_salary_profile_repository import MySQLSalaryProfileRepository
from .employees.service import EmployeeService, SalaryProfileService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .reporting.service import ReportingService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    audit_service: AuditService
    subscription_gate: SubscriptionGate
    holiday_calendar: HolidayCalendar
    settings_service: CompanySettingsService
    salary_profile_service: SalaryProfileService
    employee_service: EmployeeService
    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    reporting_service: ReportingService


def build_services(
    *,
    conn,
    companies,
    subscriptions,
    holidays,
    employees,
    profiles,
    attendance,
    leaves,
    payrolls,
    audit,
    default_timezone: str = DEFAULT_TIMEZONE,
    clock=None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, fakes in tests)."""

    audit_service = AuditService(audit)
    subscription_gate = SubscriptionGate(subscriptions)
    holiday_calendar = HolidayCalendar(holidays)
    settings_service = CompanySettingsService(companies, audit_service, default_timezone=default_timezone)

    attendance_service = AttendanceService(
        attendance,
        employees,
        settings_service,
        subscription_gate,
        holiday_calendar,
        audit_service,
        conn,
        strategy_factory=AttendanceStrategyFactory(),
        clock=clock,
    )
    leave_service = LeaveService(
        leaves,
        employees,
        attendance,
        settings_service,
        subscription_gate,
        holiday_calendar,
        audit_service,
        conn,
        clock=clock,
    )
    payroll_service = PayrollService(
        payrolls,
        employees,
        profiles,
        attendance,
        settings_service,
        subscription_gate,
        audit_service,
        conn,
        calculator=StandardPayrollCalculator(),
        clock=clock,
    )

    return Container(
        conn=conn,
        audit_service=audit_service,
        subscription_gate=subscription_gate,
        holiday_calendar=holiday_calendar,
        settings_service=settings_service,
        salary_profile_service=SalaryProfileService(profiles, audit_service),
        employee_service=EmployeeService(employees, audit_service),
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
        reporting_service=ReportingService(attendance, payrolls, employees),
    )


def build_container(*, db_config: dict, default_timezone: str = DEFAULT_TIMEZONE) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return build_services(
        conn=conn,
        companies=MySQLCompanyRepository(conn),
        subscriptions=MySQLSubscriptionRepository(conn),
        holidays=MySQLHolidayRepository(conn),
        employees=MySQLEmployeeRepository(conn),
        profiles=MySQLSalaryProfileRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        payrolls=MySQLPayrollRepository(conn),
        audit=MySQLAuditRepository(conn),
        default_timezone=default_timezone,
    )
