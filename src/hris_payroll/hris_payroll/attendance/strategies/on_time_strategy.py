from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Clock-in at or before the scheduled start."""

    def decide_clock_in(self, *, event_at: datetime, scheduled_start: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ON_TIME)
