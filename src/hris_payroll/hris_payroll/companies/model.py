from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SubscriptionStatus


@dataclass(frozen=True)
class Company:
    """Tenant settings consulted by the attendance engine."""

    company_id: int
    name: str
    timezone: str
    work_start_time: str
    office_latitude: Optional[float] = None
    office_longitude: Optional[float] = None
    office_radius_m: Optional[int] = None

    @property
    def has_geofence(self) -> bool:
        return (
            self.office_latitude is not None
            and self.office_longitude is not None
            and bool(self.office_radius_m)
        )


@dataclass(frozen=True)
class Subscription:
    company_id: int
    plan_name: str
    status: SubscriptionStatus
    end_date: datetime
    max_employees: int


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    company_id: int
    holiday_date: date
    name: str
