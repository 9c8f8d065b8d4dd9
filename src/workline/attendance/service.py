from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence, Union

from ..audit.repository import AuditLog
from ..common.datetime_utils import elapsed_minutes, now_local
from ..core.constants import DEFAULT_LATE_GRACE_MINUTES
from ..core.enums import (
    AttendanceMethod,
    AttendanceStatus,
    AuditAction,
    BreakAction,
    CheckinRejection,
    SessionRejection,
)
from ..core.exceptions import (
    DuplicateRecordError,
    NotFoundError,
    ServiceUnavailableError,
    StateError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.service import EmployeeDirectory
from ..qr_sessions.rendering import decode_image
from ..qr_sessions.service import QrSessionService
from ..schedules.resolver import ScheduleResolver
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, CheckinContext, CheckinResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Identifier = Union[int, str, None]

_SESSION_TO_CHECKIN = {
    SessionRejection.NOT_FOUND: CheckinRejection.SESSION_NOT_FOUND,
    SessionRejection.INACTIVE: CheckinRejection.SESSION_INACTIVE,
    SessionRejection.EXPIRED: CheckinRejection.SESSION_EXPIRED,
}


def parse_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in AttendanceStatus)
        raise ValidationError(f"status must be one of: {allowed}") from None


def parse_break_action(value) -> BreakAction:
    if isinstance(value, BreakAction):
        return value
    try:
        return BreakAction(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("action must be 'in' or 'out'") from None


class AttendanceService:
    """Check-in orchestration plus the per-day mutations (checkout, breaks, overrides).

    Expected business outcomes of a check-in come back as ``CheckinResult``
    rejections; checkout/break problems raise ``StateError`` with a reason.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: EmployeeDirectory,
        qr_sessions: QrSessionService,
        resolver: ScheduleResolver,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
        audit: Optional[AuditLog] = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._qr_sessions = qr_sessions
        self._resolver = resolver
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._grace_minutes = int(grace_minutes)
        self._audit = audit

    def _require_employee(self, identifier: Identifier) -> Employee:
        employee = self._directory.resolve(identifier)
        if not employee:
            raise NotFoundError("Employee not found", reason=CheckinRejection.EMPLOYEE_NOT_FOUND.value)
        return employee

    def _decide(self, employee: Employee, now: datetime):
        start_time = self._resolver.start_time_for(employee, now.date())
        strategy = self._factory.for_checkin(now=now, start_time=start_time, grace_minutes=self._grace_minutes)
        return strategy.decide_checkin(now=now, start_time=start_time, grace_minutes=self._grace_minutes)

    def _insert_once(
        self,
        employee: Employee,
        *,
        now: datetime,
        status: AttendanceStatus,
        method: AttendanceMethod,
        context: CheckinContext,
        note: Optional[str],
    ) -> CheckinResult:
        today = now.date()
        try:
            attendance_id = self._attendance.create(
                employee_id=employee.employee_id,
                work_date=today,
                time_in=now,
                status=status,
                method=method,
                latitude=context.latitude,
                longitude=context.longitude,
                device_info=context.device_info,
                note=note,
            )
        except DuplicateRecordError:
            # Lost the race against a concurrent check-in for the same day.
            existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
            return CheckinResult(record=existing, rejection=CheckinRejection.ALREADY_CHECKED_IN)

        record = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee.employee_id,
            work_date=today,
            time_in=now,
            status=status,
            method=method,
            latitude=context.latitude,
            longitude=context.longitude,
            device_info=context.device_info,
            note=note,
        )
        logger.info(
            "employee %s checked in (%s, %s) at %s",
            employee.employee_id,
            method.value,
            status.value,
            now.isoformat(),
        )
        return CheckinResult(record=record)

    def checkin(
        self,
        session_id: Optional[str],
        employee_identifier: Identifier,
        context: CheckinContext | None = None,
        *,
        now: datetime | None = None,
    ) -> CheckinResult:
        now = now or now_local()
        context = context or CheckinContext()

        employee = self._directory.resolve(employee_identifier)
        if not employee:
            return CheckinResult(record=None, rejection=CheckinRejection.EMPLOYEE_NOT_FOUND)

        check = self._qr_sessions.validate_for_use(session_id, now=now)
        if not check.ok:
            logger.info("check-in rejected for employee %s: session %s", employee.employee_id, check.rejection.value)
            return CheckinResult(record=None, rejection=_SESSION_TO_CHECKIN[check.rejection])

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        if existing:
            return CheckinResult(record=existing, rejection=CheckinRejection.ALREADY_CHECKED_IN)

        decision = self._decide(employee, now)
        return self._insert_once(
            employee,
            now=now,
            status=decision.status,
            method=AttendanceMethod.QR_SCAN,
            context=context,
            note=decision.note,
        )

    def checkin_by_image(
        self,
        image_stream,
        employee_identifier: Identifier,
        context: CheckinContext | None = None,
        *,
        now: datetime | None = None,
    ) -> CheckinResult:
        """Decode an uploaded photo of the displayed code, then check in with it."""

        try:
            session_id = decode_image(image_stream)
        except ImportError as e:
            logger.error("QR image decoding unavailable: %s", e)
            raise ServiceUnavailableError(
                "QR image decoding is not available on this server", reason="qr_decoder_unavailable"
            ) from e
        except OSError:
            raise ValidationError("Uploaded file is not a readable image") from None
        if not session_id:
            raise ValidationError("No QR code found in the image", reason="qr_not_detected")
        return self.checkin(session_id, employee_identifier, context, now=now)

    def manual_checkin(
        self,
        employee_identifier: Identifier,
        *,
        status=None,
        now: datetime | None = None,
    ) -> CheckinResult:
        now = now or now_local()

        employee = self._directory.resolve(employee_identifier)
        if not employee:
            return CheckinResult(record=None, rejection=CheckinRejection.EMPLOYEE_NOT_FOUND)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, now.date())
        if existing:
            return CheckinResult(record=existing, rejection=CheckinRejection.ALREADY_CHECKED_IN)

        if status:
            chosen, note = parse_status(status), None
        else:
            decision = self._decide(employee, now)
            chosen, note = decision.status, decision.note

        return self._insert_once(
            employee,
            now=now,
            status=chosen,
            method=AttendanceMethod.MANUAL,
            context=CheckinContext(),
            note=note,
        )

    def checkout(self, employee_identifier: Identifier, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_local()
        employee = self._require_employee(employee_identifier)

        if not self._attendance.close_checkout(employee_id=employee.employee_id, work_date=now.date(), time_out=now):
            raise StateError("No open attendance record for today", reason="no_open_record")

        logger.info("employee %s checked out at %s", employee.employee_id, now.isoformat())
        return self._attendance.get_for_employee_and_date(employee.employee_id, now.date())

    def toggle_break(
        self,
        employee_identifier: Identifier,
        action,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        action = parse_break_action(action)
        now = now or now_local()
        today = now.date()
        employee = self._require_employee(employee_identifier)

        if action == BreakAction.IN:
            if not self._attendance.start_break(employee_id=employee.employee_id, work_date=today, started_at=now):
                raise StateError("No attendance record for today", reason="no_open_record")
            return self._attendance.get_for_employee_and_date(employee.employee_id, today)

        record = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if not record:
            raise StateError("No attendance record for today", reason="no_open_record")
        if not record.on_break:
            raise StateError("Break was not started", reason="break_not_started")

        minutes = elapsed_minutes(record.break_start, now)
        closed = self._attendance.end_break(
            employee_id=employee.employee_id,
            work_date=today,
            expected_start=record.break_start,
            ended_at=now,
            minutes=minutes,
        )
        if not closed:
            # A concurrent request closed (or restarted) this break first.
            raise StateError("Break was not started", reason="break_not_started")

        logger.info("employee %s ended break after %d min", employee.employee_id, minutes)
        return self._attendance.get_for_employee_and_date(employee.employee_id, today)

    def override(
        self,
        employee_identifier: Identifier,
        *,
        work_date: date,
        status,
        time_in: Optional[datetime] = None,
        time_out: Optional[datetime] = None,
        reason: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """HR-privileged direct write that bypasses the check-in protocol."""

        status = parse_status(status)
        if time_in and time_out and time_out < time_in:
            raise ValidationError("time_out must not be before time_in")
        employee = self._require_employee(employee_identifier)

        updated = self._attendance.upsert_override(
            employee_id=employee.employee_id,
            work_date=work_date,
            time_in=time_in,
            time_out=time_out,
            status=status,
            note=reason.strip() if reason else None,
        )
        action = "updated" if updated else "created"
        logger.info("attendance override %s for employee %s on %s", action, employee.employee_id, work_date)

        if self._audit:
            self._audit.record(
                actor_id=actor_id,
                action=AuditAction.ATTENDANCE_OVERRIDE,
                details={
                    "employeeId": employee.employee_id,
                    "date": work_date.isoformat(),
                    "status": status.value,
                    "reason": reason,
                    "action": action,
                },
            )
        return self._attendance.get_for_employee_and_date(employee.employee_id, work_date)

    def history(
        self,
        *,
        start: date,
        end: date,
        employee_identifier: Identifier = None,
    ) -> Sequence[AttendanceRecord]:
        if end < start:
            raise ValidationError("end must not be before start")

        employee_id = None
        if employee_identifier not in (None, ""):
            employee_id = self._require_employee(employee_identifier).employee_id
        return self._attendance.list_range(start_date=start, end_date=end, employee_id=employee_id)
