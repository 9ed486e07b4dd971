from __future__ import annotations

import structlog

from ..core.constants import NO_RATE_LABEL, NO_SHIFT_LABEL
from ..core.exceptions import NotFoundError
from ..organizations import policy
from ..organizations.repository import OrganizationRepository
from .model import GroupAttendanceCounts, GroupPerformanceReport
from .repository import ReportRepository


def attendance_rate(counts: GroupAttendanceCounts) -> str:
    """Share of rows that were attended (present or late), as a whole percentage."""
    attended = counts.present + counts.late
    total = attended + counts.absent
    if total == 0:
        return NO_RATE_LABEL
    return f"{round(attended * 100 / total)}%"


class ReportService:
    def __init__(self, reports: ReportRepository, organizations: OrganizationRepository, *, logger=None):
        self._reports = reports
        self._orgs = organizations
        self._log = logger or structlog.get_logger(__name__)

    def get_group_performance(self, *, caller_id: str, org_id: str, group_id: str) -> GroupPerformanceReport:
        """Late count and attendance rate for one group of ``org_id``.

        Only owners and managers may read it. A group of another organization
        is reported as missing.
        """
        policy.require_staff_admin(self._orgs.get_membership(org_id, caller_id))

        counts = self._reports.get_group_performance(group_id)
        if not counts or counts.org_id != org_id:
            raise NotFoundError("group not found")

        report = GroupPerformanceReport(
            group_name=counts.group_name,
            assigned_shift=counts.shift_name or NO_SHIFT_LABEL,
            total_late_checkins=counts.late,
            attendance_rate=attendance_rate(counts),
        )
        self._log.debug("group_report_built", group_id=group_id, rows=counts.present + counts.late + counts.absent)
        return report
