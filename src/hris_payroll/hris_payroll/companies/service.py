from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..audit.service import AuditService
from ..common.datetime_utils import get_timezone, parse_hhmm
from ..common.validators import require_coordinates, require_non_empty, require_positive_int
from ..core.constants import DEFAULT_WORK_START
from ..core.enums import AuditAction, SubscriptionStatus
from ..core.exceptions import NotFoundError, SubscriptionExpired, ValidationError
from .model import Company, Holiday, Subscription
from .repository import CompanyRepository, HolidayRepository, SubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionGate:
    """Active/expired check consulted before tenant-side mutations."""

    def __init__(self, subscriptions: SubscriptionRepository, *, clock: Callable[[], datetime] = datetime.now):
        self._subscriptions = subscriptions
        self._clock = clock

    def _evaluate(self, company_id: int) -> tuple[bool, Optional[Subscription], str]:
        sub = self._subscriptions.get_for_company(int(company_id))
        if not sub:
            return False, None, "Your company has no active subscription plan"
        if sub.status == SubscriptionStatus.EXPIRED or sub.end_date < self._clock():
            return False, sub, "The subscription period has ended"
        if sub.status == SubscriptionStatus.INACTIVE:
            return False, sub, "Your company's service is currently deactivated"
        return True, sub, ""

    def is_active(self, company_id: int) -> bool:
        return self._evaluate(company_id)[0]

    def expiry(self, company_id: int) -> Optional[datetime]:
        sub = self._subscriptions.get_for_company(int(company_id))
        return sub.end_date if sub else None

    def ensure_active(self, company_id: int) -> None:
        active, _, message = self._evaluate(company_id)
        if not active:
            raise SubscriptionExpired(message)


class HolidayCalendar:
    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def holiday_on(self, company_id: int, day: date) -> Optional[Holiday]:
        return self._holidays.get_for_date(company_id=int(company_id), holiday_date=day)

    def is_holiday(self, company_id: int, day: date) -> bool:
        return self.holiday_on(company_id, day) is not None

    def holidays_between(self, company_id: int, start: date, end: date) -> set[date]:
        return {h.holiday_date for h in self._holidays.list_range(company_id=int(company_id), start=start, end=end)}

    def list_holidays(self, company_id: int, start: date, end: date) -> list[Holiday]:
        return list(self._holidays.list_range(company_id=int(company_id), start=start, end=end))

    def add_holiday(self, *, company_id: int, holiday_date: date, name: str) -> int:
        name = require_non_empty(name, "Holiday name")
        return self._holidays.create(company_id=int(company_id), holiday_date=holiday_date, name=name)

    def remove_holiday(self, *, company_id: int, holiday_id: int) -> None:
        if not self._holidays.delete(company_id=int(company_id), holiday_id=int(holiday_id)):
            raise NotFoundError("Holiday not found")


class CompanySettingsService:
    """Office geofence and work-time settings of a tenant."""

    def __init__(self, companies: CompanyRepository, audit: AuditService, *, default_timezone: str):
        self._companies = companies
        self._audit = audit
        self._default_timezone = default_timezone

    def get_company(self, company_id: int) -> Company:
        company = self._companies.get_by_id(int(company_id))
        if not company:
            raise NotFoundError("Company not found")
        return company

    def timezone_for(self, company: Company) -> str:
        tz_name = company.timezone or self._default_timezone
        get_timezone(tz_name)
        return tz_name

    def work_start_for(self, company: Company):
        return parse_hhmm(company.work_start_time or DEFAULT_WORK_START)

    def update_office_settings(
        self,
        *,
        actor_id: int,
        company_id: int,
        latitude,
        longitude,
        radius_m,
    ) -> Company:
        lat, lon = require_coordinates(latitude, longitude)
        radius = require_positive_int(radius_m, "Radius")
        self.get_company(company_id)
        self._companies.update_office(company_id=int(company_id), latitude=lat, longitude=lon, radius_m=radius)
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.SETTINGS_UPDATED,
            target=f"company:{company_id}",
            details={"office_latitude": lat, "office_longitude": lon, "office_radius_m": radius},
        )
        logger.info("Office geofence updated for company %s (radius=%sm)", company_id, radius)
        return self.get_company(company_id)

    def update_time_settings(self, *, actor_id: int, company_id: int, work_start_time: str) -> Company:
        if not isinstance(work_start_time, str):
            raise ValidationError("Work start time is required")
        value = parse_hhmm(work_start_time).strftime("%H:%M")
        self.get_company(company_id)
        self._companies.update_work_start(company_id=int(company_id), work_start_time=value)
        self._audit.record(
            actor_id=actor_id,
            company_id=company_id,
            action=AuditAction.SETTINGS_UPDATED,
            target=f"company:{company_id}",
            details={"work_start_time": value},
        )
        return self.get_company(company_id)
