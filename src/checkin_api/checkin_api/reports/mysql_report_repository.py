from __future__ import annotations

from typing import Optional

from ..core.enums import AttendanceStatus
from ..database.connection import ConnectionSource
from ..database.mysql_base import db_cursor, fetchone
from .model import GroupAttendanceCounts
from .repository import ReportRepository


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: ConnectionSource):
        self._conn_factory = conn_factory

    def get_group_performance(self, group_id: str) -> Optional[GroupAttendanceCounts]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    g.org_id,
                    g.name AS group_name,
                    s.name AS shift_name,
                    COALESCE(SUM(a.status = %s), 0) AS present_count,
                    COALESCE(SUM(a.status = %s), 0) AS late_count,
                    COALESCE(SUM(a.status = %s), 0) AS absent_count
                FROM `groups` g
                LEFT JOIN shifts s ON s.id = g.shift_id
                LEFT JOIN organization_members om ON om.group_id = g.id
                LEFT JOIN attendance a ON a.user_id = om.user_id AND a.org_id = g.org_id
                WHERE g.id=%s
                GROUP BY g.id, g.org_id, g.name, s.name
                """,
                (
                    AttendanceStatus.PRESENT.value,
                    AttendanceStatus.LATE.value,
                    AttendanceStatus.ABSENT.value,
                    group_id,
                ),
            )
            r = fetchone(cur)
            if not r:
                return None
            return GroupAttendanceCounts(
                org_id=r["org_id"],
                group_name=r["group_name"],
                shift_name=r.get("shift_name"),
                present=int(r.get("present_count") or 0),
                late=int(r.get("late_count") or 0),
                absent=int(r.get("absent_count") or 0),
            )
