from __future__ import annotations

from typing import Optional, Protocol

from .model import GroupAttendanceCounts


class ReportRepository(Protocol):
    def get_group_performance(self, group_id: str) -> Optional[GroupAttendanceCounts]:
        """Group name, shift name and attendance counts by status; None if no such group."""

        raise NotImplementedError
