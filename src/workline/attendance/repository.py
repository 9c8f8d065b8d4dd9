from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceMethod, AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance ledger keyed by (employee_id, work_date).

    Mutations are conditional single-statement updates; they return ``False``
    when the row is missing or not in the expected state.
    """

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        time_in: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        device_info: Optional[str] = None,
        note: Optional[str] = None,
    ) -> int:
        """Insert a new record and return its id.

        Raises ``DuplicateRecordError`` when the employee already has a record for ``work_date``.
        """

        raise NotImplementedError

    def close_checkout(self, *, employee_id: int, work_date: date, time_out: datetime) -> bool:
        """Set time_out only where it is still NULL."""

        raise NotImplementedError

    def start_break(self, *, employee_id: int, work_date: date, started_at: datetime) -> bool:
        raise NotImplementedError

    def end_break(
        self,
        *,
        employee_id: int,
        work_date: date,
        expected_start: datetime,
        ended_at: datetime,
        minutes: int,
    ) -> bool:
        """Close the break that started at ``expected_start`` and add ``minutes``."""

        raise NotImplementedError

    def upsert_override(
        self,
        *,
        employee_id: int,
        work_date: date,
        time_in: Optional[datetime],
        time_out: Optional[datetime],
        status: AttendanceStatus,
        note: Optional[str] = None,
    ) -> bool:
        """HR-only override. Returns ``True`` when an existing record was updated."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
