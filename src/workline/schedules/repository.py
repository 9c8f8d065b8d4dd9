from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol

from .model import Schedule


class ScheduleRepository(Protocol):
    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        raise NotImplementedError

    def upsert(self, *, employee_id: int, work_date: date, start_time: time, note: Optional[str] = None) -> int:
        """Create or update a schedule assignment.

        Returns schedule_id.
        """

        raise NotImplementedError
