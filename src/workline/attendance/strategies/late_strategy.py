from __future__ import annotations

from datetime import datetime, time
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, start_time: Optional[time], grace_minutes: int) -> StatusDecision:
        note = None
        if start_time is not None:
            late_minutes = int((now - datetime.combine(now.date(), start_time)).total_seconds() // 60)
            note = f"late by {late_minutes} min"
        return StatusDecision(status=AttendanceStatus.LATE, note=note)
