from datetime import datetime, time

from workline.attendance.factory import AttendanceStrategyFactory
from workline.attendance.strategies.late_strategy import LateStrategy
from workline.attendance.strategies.present_strategy import PresentStrategy
from workline.core.enums import AttendanceStatus


def test_factory_checkin_present_within_grace():
    now = datetime(2025, 1, 1, 9, 4, 59)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=now, start_time=time(9, 0), grace_minutes=5)

    assert isinstance(strategy, PresentStrategy)


def test_factory_checkin_present_exactly_at_grace_boundary():
    now = datetime(2025, 1, 1, 9, 5, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, start_time=time(9, 0), grace_minutes=5)

    assert isinstance(strategy, PresentStrategy)


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 1, 9, 6, 0)

    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(now=now, start_time=time(9, 0), grace_minutes=5)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, start_time=time(9, 0), grace_minutes=5)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "late by 6 min"


def test_factory_without_start_time_is_present():
    now = datetime(2025, 1, 1, 23, 59, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, start_time=None, grace_minutes=5)

    assert isinstance(strategy, PresentStrategy)
    assert strategy.decide_checkin(now=now, start_time=None, grace_minutes=5).status == AttendanceStatus.PRESENT
