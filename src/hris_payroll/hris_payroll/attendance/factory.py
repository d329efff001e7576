from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_clock_in(self, *, event_at: datetime, scheduled_start: datetime) -> AttendanceStrategy:
        # Exactly on the scheduled start is still on time.
        if event_at <= scheduled_start:
            return OnTimeStrategy()
        return LateStrategy()
