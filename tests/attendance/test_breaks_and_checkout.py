from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from workline.core.enums import AttendanceMethod, AttendanceStatus, AuditAction
from workline.core.exceptions import NotFoundError, StateError, ValidationError


@pytest.fixture
def checked_in(container, fixed_now):
    container.attendance_service.manual_checkin(2, now=fixed_now)
    return container


def test_break_in_then_out_adds_rounded_minutes(checked_in, fixed_now):
    svc = checked_in.attendance_service
    start = fixed_now.replace(hour=12, minute=0)

    started = svc.toggle_break(2, "in", now=start)
    assert started.on_break

    ended = svc.toggle_break(2, "out", now=start + timedelta(minutes=12, seconds=20))

    assert ended.break_minutes == 12
    assert ended.break_end == start + timedelta(minutes=12, seconds=20)
    assert not ended.on_break


def test_half_minute_rounds_up_and_breaks_accumulate(checked_in, fixed_now):
    svc = checked_in.attendance_service
    start = fixed_now.replace(hour=12)

    svc.toggle_break(2, "in", now=start)
    svc.toggle_break(2, "out", now=start + timedelta(minutes=2, seconds=30))
    svc.toggle_break(2, "in", now=start + timedelta(hours=1))
    record = svc.toggle_break(2, "out", now=start + timedelta(hours=1, minutes=10))

    assert record.break_minutes == 13


def test_repeated_break_in_at_same_instant_keeps_break_open(checked_in, fixed_now):
    svc = checked_in.attendance_service
    start = fixed_now.replace(hour=12)

    svc.toggle_break(2, "in", now=start)
    again = svc.toggle_break(2, "in", now=start)

    assert again.on_break
    assert again.break_start == start
    assert svc.toggle_break(2, "out", now=start + timedelta(minutes=4)).break_minutes == 4


def test_break_out_without_start(checked_in, fixed_now):
    with pytest.raises(StateError) as exc:
        checked_in.attendance_service.toggle_break(2, "out", now=fixed_now)

    assert exc.value.reason == "break_not_started"


def test_second_break_out_is_rejected(checked_in, fixed_now):
    svc = checked_in.attendance_service
    svc.toggle_break(2, "in", now=fixed_now)
    svc.toggle_break(2, "out", now=fixed_now + timedelta(minutes=5))

    with pytest.raises(StateError) as exc:
        svc.toggle_break(2, "out", now=fixed_now + timedelta(minutes=6))

    assert exc.value.reason == "break_not_started"
    assert svc.history(start=fixed_now.date(), end=fixed_now.date())[0].break_minutes == 5


def test_break_without_record(container, fixed_now):
    with pytest.raises(StateError) as exc:
        container.attendance_service.toggle_break(2, "in", now=fixed_now)

    assert exc.value.reason == "no_open_record"


def test_break_action_must_be_in_or_out(checked_in, fixed_now):
    with pytest.raises(ValidationError):
        checked_in.attendance_service.toggle_break(2, "pause", now=fixed_now)


def test_checkout_sets_time_out_once(checked_in, fixed_now):
    svc = checked_in.attendance_service
    evening = fixed_now.replace(hour=17, minute=30)

    record = svc.checkout("jdoe", now=evening)

    assert record.time_out == evening
    with pytest.raises(StateError) as exc:
        svc.checkout("jdoe", now=evening + timedelta(minutes=1))
    assert exc.value.reason == "no_open_record"


def test_checkout_without_checkin(container, fixed_now):
    with pytest.raises(StateError) as exc:
        container.attendance_service.checkout(2, now=fixed_now)

    assert exc.value.reason == "no_open_record"


def test_checkout_unknown_employee(container, fixed_now):
    with pytest.raises(NotFoundError) as exc:
        container.attendance_service.checkout("nobody", now=fixed_now)

    assert exc.value.reason == "employee_not_found"


def test_override_creates_then_updates_and_audits(container):
    svc = container.attendance_service
    day = date(2026, 1, 15)

    created = svc.override(
        2,
        work_date=day,
        status="absent",
        reason="no show",
        actor_id=1,
    )
    assert created.status == AttendanceStatus.ABSENT
    assert created.method == AttendanceMethod.OVERRIDE

    updated = svc.override(
        2,
        work_date=day,
        status="present",
        time_in=datetime(2026, 1, 15, 9, 0),
        time_out=datetime(2026, 1, 15, 17, 0),
        reason="forgot to scan",
        actor_id=1,
    )
    assert updated.attendance_id == created.attendance_id
    assert updated.status == AttendanceStatus.PRESENT
    assert updated.time_out == datetime(2026, 1, 15, 17, 0)

    actions = [e["details"]["action"] for e in container.audit_log.entries if e["action"] == AuditAction.ATTENDANCE_OVERRIDE]
    assert actions == ["created", "updated"]


def test_override_rejects_time_out_before_time_in(container):
    with pytest.raises(ValidationError):
        container.attendance_service.override(
            2,
            work_date=date(2026, 1, 15),
            status="present",
            time_in=datetime(2026, 1, 15, 17, 0),
            time_out=datetime(2026, 1, 15, 9, 0),
        )
