from datetime import datetime, timezone

from src.checkin_api.checkin_api.attendance.factory import AttendanceStrategyFactory
from src.checkin_api.checkin_api.attendance.strategies.late_strategy import LateStrategy
from src.checkin_api.checkin_api.attendance.strategies.normal_strategy import NormalStrategy
from src.checkin_api.checkin_api.core.constants import OFF_DAY_NOTE
from src.checkin_api.checkin_api.core.enums import AttendanceStatus
from src.checkin_api.checkin_api.shifts.model import Shift

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def _shift(**overrides) -> Shift:
    values = dict(
        id="s1",
        org_id="o1",
        name="Morning",
        start_time="09:00",
        end_time="17:00",
        timezone="Asia/Ho_Chi_Minh",  # UTC+7, no DST
        allowed_late_minutes=15,
        working_days=WEEKDAYS,
    )
    values.update(overrides)
    return Shift(**values)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_factory_checkin_on_time_within_grace():
    # Wed 2025-01-01 09:10 local
    now = _utc(2025, 1, 1, 2, 10)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=_shift())

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=now, shift=_shift()).status == AttendanceStatus.PRESENT


def test_factory_checkin_at_grace_boundary_is_present():
    now = _utc(2025, 1, 1, 2, 15)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=_shift())

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_grace():
    shift = _shift()
    now = _utc(2025, 1, 1, 2, 16)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=shift)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(now=now, shift=shift)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "late by 16 minutes"


def test_factory_without_grace_is_late_one_minute_after_start():
    now = _utc(2025, 1, 1, 2, 1)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=_shift(allowed_late_minutes=0))

    assert isinstance(strategy, LateStrategy)


def test_factory_non_working_day_is_present_with_note():
    # Sat 2025-01-04 12:00 local, hours after shift start
    now = _utc(2025, 1, 4, 5, 0)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=_shift())

    decision = strategy.decide_checkin(now=now, shift=_shift())
    assert isinstance(strategy, NormalStrategy)
    assert decision.status == AttendanceStatus.PRESENT
    assert decision.note == OFF_DAY_NOTE


def test_factory_uses_shift_local_weekday():
    # Fri 2025-01-03 20:00 UTC is already Saturday 03:00 in UTC+7
    now = _utc(2025, 1, 3, 20, 0)
    decision = AttendanceStrategyFactory().for_checkin(now=now, shift=_shift()).decide_checkin(now=now, shift=_shift())

    assert decision.note == OFF_DAY_NOTE


def test_factory_compares_in_shift_timezone_not_utc():
    # 09:30 UTC would be late against a UTC clock, but it is 04:30 in New York (EST)
    shift = _shift(timezone="America/New_York")
    now = _utc(2025, 1, 1, 9, 30)

    assert isinstance(AttendanceStrategyFactory().for_checkin(now=now, shift=shift), NormalStrategy)

    # 14:16 UTC is 09:16 EST: past the 15 minute grace
    late = _utc(2025, 1, 1, 14, 16)
    assert isinstance(AttendanceStrategyFactory().for_checkin(now=late, shift=shift), LateStrategy)


def test_factory_without_shift_is_present():
    strategy = AttendanceStrategyFactory().for_checkin(now=_utc(2025, 1, 1, 23, 0), shift=None)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=_utc(2025, 1, 1, 23, 0), shift=None).note == ""


def _night(**overrides) -> Shift:
    values = dict(name="Night", start_time="22:00", end_time="06:00", timezone="UTC", allowed_late_minutes=0)
    values.update(overrides)
    return _shift(**values)


def test_factory_night_shift_after_midnight_is_late():
    shift = _night()
    # Thu 03:00 belongs to Wednesday's 22:00 start
    now = _utc(2025, 1, 2, 3, 0)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=shift)

    assert isinstance(strategy, LateStrategy)
    assert strategy.decide_checkin(now=now, shift=shift).note == "late by 300 minutes"


def test_factory_night_shift_early_arrival_is_present():
    now = _utc(2025, 1, 1, 21, 50)

    assert isinstance(AttendanceStrategyFactory().for_checkin(now=now, shift=_night()), NormalStrategy)


def test_factory_night_shift_working_day_is_the_start_day():
    shift = _night()

    # Sat 02:00 is still Friday's shift
    saturday = _utc(2025, 1, 4, 2, 0)
    assert AttendanceStrategyFactory().for_checkin(now=saturday, shift=shift).decide_checkin(
        now=saturday, shift=shift
    ).note == "late by 240 minutes"

    # Mon 02:00 would be Sunday's shift, which does not run
    monday = _utc(2025, 1, 6, 2, 0)
    assert AttendanceStrategyFactory().for_checkin(now=monday, shift=shift).decide_checkin(
        now=monday, shift=shift
    ).note == OFF_DAY_NOTE


def test_factory_check_in_just_before_midnight_shift_is_early():
    shift = _shift(start_time="00:00", end_time="08:00", timezone="UTC", allowed_late_minutes=0)
    # Tue 23:59, one minute before Wednesday's shift
    now = _utc(2024, 12, 31, 23, 59)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, shift=shift)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=now, shift=shift).note == ""


def test_factory_late_during_long_day_shift():
    shift = _shift(start_time="06:00", end_time="20:00", timezone="UTC", allowed_late_minutes=0)
    # 19:00 is closer to tomorrow's start but still inside today's shift
    now = _utc(2025, 1, 1, 19, 0)

    decision = AttendanceStrategyFactory().for_checkin(now=now, shift=shift).decide_checkin(now=now, shift=shift)
    assert decision.note == "late by 780 minutes"
