from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional


@dataclass(frozen=True)
class Schedule:
    """Per-date start time assignment; overrides the employee default for that day."""

    schedule_id: int
    employee_id: int
    work_date: date
    start_time: time
    note: Optional[str] = None
