from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

from ..common.datetime_utils import to_local
from ..common.validators import parse_time_of_day


@dataclass(frozen=True)
class Shift:
    """Domain entity: a recurring work-time template shared by groups.

    A shift whose ``end_time`` is not after its ``start_time`` runs overnight
    and ends on the following day.
    """

    id: str
    org_id: str
    name: str
    start_time: str
    end_time: str
    timezone: str
    allowed_late_minutes: int = 0
    working_days: tuple[str, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    @property
    def start(self) -> time:
        return parse_time_of_day(self.start_time)

    @property
    def end(self) -> time:
        return parse_time_of_day(self.end_time)

    @property
    def is_overnight(self) -> bool:
        return self.end <= self.start

    def works_on(self, day_name: str) -> bool:
        return day_name in self.working_days

    def local_time(self, instant: datetime) -> datetime:
        """``instant`` expressed in the shift's timezone."""
        return to_local(instant, self.timezone)

    def _localize(self, local_day: date, at: time) -> datetime:
        return pytz.timezone(self.timezone).localize(datetime.combine(local_day, at))

    def start_at(self, local_day: date) -> datetime:
        """Aware start of the shift that begins on ``local_day`` in the shift's timezone."""
        return self._localize(local_day, self.start)

    def end_at(self, local_day: date) -> datetime:
        """Aware end of the shift that begins on ``local_day``."""
        end_day = local_day + timedelta(days=1) if self.is_overnight else local_day
        return self._localize(end_day, self.end)

    def anchor_day(self, local: datetime) -> date:
        """Start day of the shift occurrence a local check-in belongs to.

        An occurrence running at ``local`` wins. Outside every occurrence the
        one with the nearest start is used, so arriving early counts toward
        the next shift.
        """
        days = [local.date() + timedelta(days=offset) for offset in (-1, 0, 1)]
        for day in days:
            if self.start_at(day) <= local < self.end_at(day):
                return day
        return min(days, key=lambda day: abs(self.start_at(day) - local))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "timezone": self.timezone,
            "allowed_late_minutes": self.allowed_late_minutes,
            "working_days": list(self.working_days),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
