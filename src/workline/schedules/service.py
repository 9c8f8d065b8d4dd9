from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository, employees: EmployeeRepository):
        self._schedules = schedules
        self._employees = employees

    def assign(
        self,
        *,
        employee_id: int,
        work_date: date,
        start_time: time,
        note: Optional[str] = None,
    ) -> int:
        if int(employee_id) <= 0:
            raise ValidationError("employee_id is invalid")
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found", reason="employee_not_found")

        note = note.strip() if note else None
        return self._schedules.upsert(
            employee_id=int(employee_id),
            work_date=work_date,
            start_time=start_time,
            note=note,
        )
