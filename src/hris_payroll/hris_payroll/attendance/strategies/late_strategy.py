from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


def late_minutes(event_at: datetime, scheduled_start: datetime) -> int:
    """Whole minutes past the scheduled start; any lateness counts as at least 1."""
    seconds = (event_at - scheduled_start).total_seconds()
    if seconds <= 0:
        return 0
    return max(int(seconds // 60), 1)


class LateStrategy(AttendanceStrategy):
    """Late clock-in."""

    def decide_clock_in(self, *, event_at: datetime, scheduled_start: datetime) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.LATE,
            is_late=True,
            late_minutes=late_minutes(event_at, scheduled_start),
        )
