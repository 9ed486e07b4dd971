from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import OFF_DAY_NOTE, WORKING_DAY_NAMES
from ..shifts.model import Shift
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on shift rules.

    Times are compared in the shift's own timezone, against the occurrence the
    check-in belongs to (an overnight shift is anchored on the day it started).
    Check-ins on days the shift does not cover are never late.
    """

    def for_checkin(self, *, now: datetime, shift: Optional[Shift]) -> AttendanceStrategy:
        if not shift:
            return NormalStrategy()

        local = shift.local_time(now)
        day = shift.anchor_day(local)
        if not shift.works_on(WORKING_DAY_NAMES[day.weekday()]):
            return NormalStrategy(note=OFF_DAY_NOTE)

        if local <= shift.start_at(day) + timedelta(minutes=shift.allowed_late_minutes):
            return NormalStrategy()
        return LateStrategy()
