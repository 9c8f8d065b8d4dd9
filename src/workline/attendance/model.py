from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import AttendanceMethod, AttendanceStatus, CheckinRejection


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per employee per day."""

    attendance_id: int
    employee_id: int
    work_date: date
    time_in: Optional[datetime]
    status: AttendanceStatus
    method: AttendanceMethod
    time_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    break_minutes: int = 0
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    device_info: Optional[str] = None
    note: Optional[str] = None

    @property
    def timestamp(self) -> Optional[datetime]:
        """Work date and check-in time merged, the value dashboards sort and render by."""
        if self.time_in is None:
            return None
        return datetime.combine(self.work_date, self.time_in.time())

    @property
    def on_break(self) -> bool:
        return self.break_start is not None and self.break_end is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "timestamp": isoformat_or_none(self.timestamp),
            "time_in": isoformat_or_none(self.time_in),
            "time_out": isoformat_or_none(self.time_out),
            "break_start": isoformat_or_none(self.break_start),
            "break_end": isoformat_or_none(self.break_end),
            "break_minutes": self.break_minutes,
            "status": self.status.value,
            "method": self.method.value,
            "note": self.note,
        }


@dataclass(frozen=True)
class CheckinContext:
    """What the scanning device reported alongside the scan."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    device_info: Optional[str] = None


@dataclass(frozen=True)
class CheckinResult:
    """Outcome of a check-in.

    On ``already_checked_in`` the existing record is carried so callers can
    show it instead of retrying.
    """

    record: Optional[AttendanceRecord]
    rejection: Optional[CheckinRejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None
