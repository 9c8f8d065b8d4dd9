from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles carried in bearer tokens."""

    SUPERADMIN = "superadmin"
    HR = "hr"
    HEAD_DEPT = "head_dept"
    EMPLOYEE = "employee"


class SessionType(str, Enum):
    """Lifecycle of a QR session: short-lived rotating or long-lived static."""

    ROTATING = "rotating"
    STATIC = "static"


class AttendanceStatus(str, Enum):
    """Attendance status stored on the record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    ON_LEAVE = "on_leave"


class AttendanceMethod(str, Enum):
    QR_SCAN = "qr_scan"
    MANUAL = "manual"
    OVERRIDE = "override"


class BreakAction(str, Enum):
    IN = "in"
    OUT = "out"


class SessionRejection(str, Enum):
    """Why a QR session cannot be used, in check order."""

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class CheckinRejection(str, Enum):
    """Client-correctable outcomes of a scan-based check-in."""

    EMPLOYEE_NOT_FOUND = "employee_not_found"
    SESSION_NOT_FOUND = "session_not_found"
    SESSION_INACTIVE = "session_inactive"
    SESSION_EXPIRED = "session_expired"
    ALREADY_CHECKED_IN = "already_checked_in"


class AuditAction(str, Enum):
    QR_GENERATED = "QR_GENERATED"
    QR_REVOKED = "QR_REVOKED"
    ATTENDANCE_OVERRIDE = "ATTENDANCE_OVERRIDE"
