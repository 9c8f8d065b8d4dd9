from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Optional

from workline.attendance.model import AttendanceRecord
from workline.core.enums import AttendanceMethod, AttendanceStatus
from workline.core.exceptions import DuplicateRecordError
from workline.employees.model import Employee
from workline.qr_sessions.model import QrSession
from workline.schedules.model import Schedule


@dataclass
class InMemoryEmployees:
    employees_by_id: dict[int, Employee]

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        return self.employees_by_id.get(int(employee_id))

    def get_by_username(self, username: str) -> Optional[Employee]:
        return next((e for e in self.employees_by_id.values() if e.username == username), None)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return next((e for e in self.employees_by_id.values() if e.email == email), None)


@dataclass
class InMemorySchedules:
    by_employee_date: dict[tuple[int, date], Schedule] = field(default_factory=dict)

    def get_for_employee_and_date(self, *, employee_id: int, work_date: date) -> Optional[Schedule]:
        return self.by_employee_date.get((employee_id, work_date))

    def upsert(self, *, employee_id: int, work_date: date, start_time: time, note: Optional[str] = None) -> int:
        existing = self.by_employee_date.get((employee_id, work_date))
        schedule_id = existing.schedule_id if existing else len(self.by_employee_date) + 1
        self.by_employee_date[(employee_id, work_date)] = Schedule(
            schedule_id=schedule_id,
            employee_id=employee_id,
            work_date=work_date,
            start_time=start_time,
            note=note,
        )
        return schedule_id


class InMemoryQrSessions:
    def __init__(self):
        self._lock = threading.Lock()
        self.sessions: dict[str, QrSession] = {}

    def replace_active(self, session: QrSession) -> int:
        with self._lock:
            count = 0
            for sid, s in list(self.sessions.items()):
                if s.is_active:
                    self.sessions[sid] = replace(s, is_active=False)
                    count += 1
            self.sessions[session.session_id] = session
            return count

    def get_by_id(self, session_id: str) -> Optional[QrSession]:
        return self.sessions.get(session_id)

    def list_active(self, *, now: datetime):
        usable = [s for s in self.sessions.values() if s.is_usable(now)]
        usable.sort(key=lambda s: s.created_at, reverse=True)
        return usable

    def deactivate_all(self) -> int:
        with self._lock:
            count = 0
            for sid, s in list(self.sessions.items()):
                if s.is_active:
                    self.sessions[sid] = replace(s, is_active=False)
                    count += 1
            return count

    def deactivate_expired(self, *, now: datetime) -> int:
        with self._lock:
            count = 0
            for sid, s in list(self.sessions.items()):
                if s.is_active and s.is_expired(now):
                    self.sessions[sid] = replace(s, is_active=False)
                    count += 1
            return count

    def active_count(self) -> int:
        return sum(1 for s in self.sessions.values() if s.is_active)


class InMemoryAttendance:
    """Mirrors the unique (employee_id, work_date) key and the conditional updates."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_employee_date: dict[tuple[int, date], AttendanceRecord] = {}
        self._id = 0

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return self._by_employee_date.get((employee_id, work_date))

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        time_in: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        latitude=None,
        longitude=None,
        device_info=None,
        note=None,
    ) -> int:
        with self._lock:
            if (employee_id, work_date) in self._by_employee_date:
                raise DuplicateRecordError("duplicate attendance row")
            self._id += 1
            self._by_employee_date[(employee_id, work_date)] = AttendanceRecord(
                attendance_id=self._id,
                employee_id=employee_id,
                work_date=work_date,
                time_in=time_in,
                status=status,
                method=method,
                latitude=latitude,
                longitude=longitude,
                device_info=device_info,
                note=note,
            )
            return self._id

    def _update_if(self, key, predicate: Callable[[AttendanceRecord], bool], **changes: Any) -> bool:
        with self._lock:
            rec = self._by_employee_date.get(key)
            if rec is None or not predicate(rec):
                return False
            self._by_employee_date[key] = replace(rec, **changes)
            return True

    def close_checkout(self, *, employee_id: int, work_date: date, time_out: datetime) -> bool:
        return self._update_if((employee_id, work_date), lambda r: r.time_out is None, time_out=time_out)

    def start_break(self, *, employee_id: int, work_date: date, started_at: datetime) -> bool:
        return self._update_if((employee_id, work_date), lambda r: True, break_start=started_at, break_end=None)

    def end_break(self, *, employee_id: int, work_date: date, expected_start: datetime, ended_at: datetime, minutes: int) -> bool:
        with self._lock:
            key = (employee_id, work_date)
            rec = self._by_employee_date.get(key)
            if rec is None or rec.break_start != expected_start or rec.break_end is not None:
                return False
            self._by_employee_date[key] = replace(
                rec,
                break_end=ended_at,
                break_minutes=rec.break_minutes + int(minutes),
            )
            return True

    def upsert_override(self, *, employee_id: int, work_date: date, time_in, time_out, status, note=None) -> bool:
        with self._lock:
            key = (employee_id, work_date)
            rec = self._by_employee_date.get(key)
            if rec is None:
                self._id += 1
                self._by_employee_date[key] = AttendanceRecord(
                    attendance_id=self._id,
                    employee_id=employee_id,
                    work_date=work_date,
                    time_in=time_in,
                    time_out=time_out,
                    status=status,
                    method=AttendanceMethod.OVERRIDE,
                    note=note,
                )
                return False
            self._by_employee_date[key] = replace(
                rec,
                time_in=time_in or rec.time_in,
                time_out=time_out or rec.time_out,
                status=status,
                method=AttendanceMethod.OVERRIDE,
                note=note,
            )
            return True

    def list_range(self, *, start_date: date, end_date: date, employee_id: Optional[int] = None):
        items = [
            r
            for r in self._by_employee_date.values()
            if start_date <= r.work_date <= end_date and (employee_id is None or r.employee_id == employee_id)
        ]
        items.sort(key=lambda r: (r.work_date, r.time_in or datetime.min), reverse=True)
        return items

    def count(self) -> int:
        return len(self._by_employee_date)


@dataclass
class RecordingAuditLog:
    entries: list[dict] = field(default_factory=list)

    def record(self, *, actor_id, action, details) -> None:
        self.entries.append({"actor_id": actor_id, "action": action, "details": dict(details)})


class _FakeHandle:
    def __init__(self, owner: "FakeScheduler", due: float, seq: int, callback):
        self._owner = owner
        self.due = due
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock for the display controller: ``advance`` fires due callbacks in order."""

    def __init__(self, clock: Optional["FakeClock"] = None):
        self.now = 0.0
        self.clock = clock
        self._handles: list[_FakeHandle] = []
        self._seq = 0

    def call_later(self, delay: float, callback) -> _FakeHandle:
        self._seq += 1
        handle = _FakeHandle(self, self.now + float(delay), self._seq, callback)
        self._handles.append(handle)
        return handle

    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.seq))
            self._handles.remove(handle)
            self._move_to(handle.due)
            handle.callback()
        self._move_to(target)
        self._handles = [h for h in self._handles if not h.cancelled]

    def _move_to(self, t: float) -> None:
        if self.clock is not None:
            self.clock.advance(t - self.now)
        self.now = t


class FakeClock:
    def __init__(self, start: datetime):
        self.current = start

    def advance(self, seconds: float) -> None:
        self.current = self.current + timedelta(seconds=seconds)

    def __call__(self) -> datetime:
        return self.current
