from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GroupAttendanceCounts:
    """Read-model returned by the report query (optimized for aggregation)."""

    org_id: str
    group_name: str
    shift_name: Optional[str]
    present: int = 0
    late: int = 0
    absent: int = 0


@dataclass(frozen=True)
class GroupPerformanceReport:
    group_name: str
    assigned_shift: str
    total_late_checkins: int
    attendance_rate: str

    def to_dict(self) -> dict:
        return {
            "group_name": self.group_name,
            "assigned_shift": self.assigned_shift,
            "total_late_checkins": self.total_late_checkins,
            "attendance_rate": self.attendance_rate,
        }
