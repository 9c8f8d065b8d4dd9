from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..employees.model import Employee
from .repository import ScheduleRepository


class ScheduleResolver:
    """Expected start time for an employee on a date, or ``None`` for "not evaluated".

    A per-date assignment wins over the employee's default start time.
    """

    def __init__(self, schedules: Optional[ScheduleRepository] = None):
        self._schedules = schedules

    def start_time_for(self, employee: Employee, work_date: date) -> Optional[time]:
        if self._schedules:
            sc = self._schedules.get_for_employee_and_date(employee_id=employee.employee_id, work_date=work_date)
            if sc:
                return sc.start_time
        return employee.schedule_start_time
