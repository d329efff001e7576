from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Company, Holiday, Subscription


class CompanyRepository(Protocol):
    def get_by_id(self, company_id: int) -> Optional[Company]:
        raise NotImplementedError

    def update_office(self, *, company_id: int, latitude: float, longitude: float, radius_m: int) -> bool:
        raise NotImplementedError

    def update_work_start(self, *, company_id: int, work_start_time: str) -> bool:
        raise NotImplementedError


class SubscriptionRepository(Protocol):
    def get_for_company(self, company_id: int) -> Optional[Subscription]:
        raise NotImplementedError


class HolidayRepository(Protocol):
    def get_for_date(self, *, company_id: int, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def list_range(self, *, company_id: int, start: date, end: date) -> Sequence[Holiday]:
        raise NotImplementedError

    def create(self, *, company_id: int, holiday_date: date, name: str) -> int:
        raise NotImplementedError

    def delete(self, *, company_id: int, holiday_id: int) -> bool:
        raise NotImplementedError
