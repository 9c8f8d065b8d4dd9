from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Optional

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, start_time: Optional[time], grace_minutes: int) -> AttendanceStrategy:
        if start_time is None:
            return PresentStrategy()

        threshold = datetime.combine(now.date(), start_time) + timedelta(minutes=grace_minutes)
        if now <= threshold:
            return PresentStrategy()
        return LateStrategy()
