from __future__ import annotations

from datetime import datetime, time

import pytest

from workline.common.auth import issue_token
from workline.container import Policy, wire
from workline.core.enums import Role
from workline.employees.model import Employee

from .fakes import InMemoryAttendance, InMemoryEmployees, InMemoryQrSessions, InMemorySchedules, RecordingAuditLog

TEST_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        {
            1: Employee(employee_id=1, username="hr.demo", full_name="HR Demo", email="hr@example.com"),
            2: Employee(
                employee_id=2,
                username="jdoe",
                full_name="John Doe",
                email="jdoe@example.com",
                schedule_start_time=time(9, 0),
            ),
            3: Employee(employee_id=3, username="asmith", full_name="Anna Smith", email="asmith@example.com"),
            4: Employee(employee_id=4, username="gone", full_name="Former Staff", is_active=False),
        }
    )


@pytest.fixture
def container(employees):
    return wire(
        employees_repo=employees,
        schedules_repo=InMemorySchedules(),
        qr_sessions_repo=InMemoryQrSessions(),
        attendance_repo=InMemoryAttendance(),
        audit_log=RecordingAuditLog(),
        policy=Policy(grace_minutes=5, rotating_default_minutes=1, static_default_hours=24),
    )


@pytest.fixture
def app(container):
    from workline.main import create_app

    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(role: Role, user_id: int = 1) -> dict:
    token = issue_token(user_id=user_id, role=role, secret_key=TEST_SECRET)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def hr_headers() -> dict:
    return bearer(Role.HR)


@pytest.fixture
def employee_headers() -> dict:
    return bearer(Role.EMPLOYEE, user_id=2)


@pytest.fixture
def zbar():
    """Skip unless pyzbar can load the native zbar library (it loads lazily on first decode)."""
    zbar_library = pytest.importorskip("pyzbar.zbar_library")
    try:
        zbar_library.load()
    except ImportError as e:
        pytest.skip(f"zbar shared library not available: {e}")
