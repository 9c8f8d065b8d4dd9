from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_log import MySQLAuditLog
from .audit.repository import AuditLog
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_ROTATING_MINUTES, DEFAULT_STATIC_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeDirectory
from .qr_sessions.mysql_qr_session_repository import MySQLQrSessionRepository
from .qr_sessions.repository import QrSessionRepository
from .qr_sessions.service import QrSessionService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.resolver import ScheduleResolver
from .schedules.service import ScheduleService


@dataclass(frozen=True)
class Policy:
    grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES
    rotating_default_minutes: float = DEFAULT_ROTATING_MINUTES
    static_default_hours: float = DEFAULT_STATIC_HOURS


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    schedules_repo: ScheduleRepository
    qr_sessions_repo: QrSessionRepository
    attendance_repo: AttendanceRepository
    audit_log: Optional[AuditLog]

    qr_session_service: QrSessionService
    attendance_service: AttendanceService
    schedule_service: ScheduleService


def wire(
    *,
    employees_repo: EmployeeRepository,
    schedules_repo: ScheduleRepository,
    qr_sessions_repo: QrSessionRepository,
    attendance_repo: AttendanceRepository,
    audit_log: Optional[AuditLog] = None,
    policy: Policy = Policy(),
) -> Container:
    """Build services on top of any set of repositories (MySQL in the app, in-memory in tests)."""

    qr_session_service = QrSessionService(
        qr_sessions_repo,
        audit=audit_log,
        rotating_default_minutes=policy.rotating_default_minutes,
        static_default_hours=policy.static_default_hours,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        EmployeeDirectory(employees_repo),
        qr_session_service,
        ScheduleResolver(schedules_repo),
        strategy_factory=AttendanceStrategyFactory(),
        grace_minutes=policy.grace_minutes,
        audit=audit_log,
    )
    schedule_service = ScheduleService(schedules_repo, employees_repo)

    return Container(
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        qr_sessions_repo=qr_sessions_repo,
        attendance_repo=attendance_repo,
        audit_log=audit_log,
        qr_session_service=qr_session_service,
        attendance_service=attendance_service,
        schedule_service=schedule_service,
    )


def build_container(*, db_config: dict, policy: Policy = Policy()) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return wire(
        employees_repo=MySQLEmployeeRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        qr_sessions_repo=MySQLQrSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        audit_log=MySQLAuditLog(conn),
        policy=policy,
    )
