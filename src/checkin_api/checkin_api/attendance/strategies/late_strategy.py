from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import Shift
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in (past shift start plus the allowed late minutes)."""

    def decide_checkin(self, *, now: datetime, shift: Optional[Shift]) -> StatusDecision:
        if not shift:
            return StatusDecision(status=AttendanceStatus.LATE)

        local = shift.local_time(now)
        minutes = int((local - shift.start_at(shift.anchor_day(local))).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"late by {minutes} minutes")
