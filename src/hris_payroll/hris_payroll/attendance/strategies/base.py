from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    is_late: bool = False
    late_minutes: int = 0


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how a clock-in is classified."""

    @abstractmethod
    def decide_clock_in(self, *, event_at: datetime, scheduled_start: datetime) -> StatusDecision:
        raise NotImplementedError
