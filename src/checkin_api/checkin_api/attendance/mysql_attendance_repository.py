from __future__ import annotations

import json
import uuid
from datetime import datetime
from typing import Optional, Tuple

import mysql.connector

from ..common.datetime_utils import ensure_utc, to_db, utc_now
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import StateConflictError
from ..database.connection import ConnectionSource
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchone
from ..organizations.model import Group
from ..shifts.model import Shift
from .model import Attendance, Task
from .repository import AttendanceRepository

_OPEN_ATTENDANCE_KEY = "uq_attendance_open_user"


def _to_task(r: dict) -> Task:
    return Task(
        id=r["id"],
        org_id=r["org_id"],
        title=r["title"],
        assigned_user_id=r.get("assigned_user_id"),
        geofencing_enabled=bool(r.get("geofencing_enabled")),
        location_name=r.get("location_name") or "",
        latitude=float(r.get("latitude") or 0),
        longitude=float(r.get("longitude") or 0),
        radius_meters=int(r.get("radius_meters") or 0),
        created_at=ensure_utc(r.get("created_at")),
    )


def _to_attendance(r: dict) -> Attendance:
    return Attendance(
        id=r["id"],
        user_id=r["user_id"],
        org_id=r["org_id"],
        task_id=r.get("task_id"),
        check_in_time=ensure_utc(r["check_in_time"]),
        check_out_time=ensure_utc(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        type=AttendanceType(r["type"]),
        shift_applied=r.get("shift_applied"),
        location_lat=float(r.get("location_lat") or 0),
        location_long=float(r.get("location_long") or 0),
        note=r.get("note") or "",
        created_at=ensure_utc(r.get("created_at")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: ConnectionSource):
        self._conn_factory = conn_factory

    def create_task(
        self,
        *,
        org_id: str,
        title: str,
        assigned_user_id: Optional[str] = None,
        geofencing_enabled: bool = False,
        location_name: str = "",
        latitude: float = 0.0,
        longitude: float = 0.0,
        radius_meters: int = 0,
    ) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            org_id=org_id,
            title=title,
            assigned_user_id=assigned_user_id,
            geofencing_enabled=bool(geofencing_enabled),
            location_name=location_name,
            latitude=float(latitude),
            longitude=float(longitude),
            radius_meters=int(radius_meters),
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(id, org_id, title, assigned_user_id, geofencing_enabled, location_name,
                                  latitude, longitude, radius_meters, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task.id,
                    org_id,
                    title,
                    assigned_user_id,
                    int(task.geofencing_enabled),
                    location_name,
                    task.latitude,
                    task.longitude,
                    task.radius_meters,
                    to_db(task.created_at),
                ),
            )
        return task

    def get_task_by_id(self, task_id: str) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, org_id, title, assigned_user_id, geofencing_enabled, location_name,
                       latitude, longitude, radius_meters, created_at
                FROM tasks
                WHERE id=%s
                """,
                (task_id,),
            )
            r = fetchone(cur)
            return _to_task(r) if r else None

    def lock_user(self, user_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM users WHERE id=%s FOR UPDATE", (user_id,))
            fetchone(cur)

    def create_attendance(
        self,
        *,
        user_id: str,
        org_id: str,
        check_in_time: datetime,
        status: AttendanceStatus,
        type: AttendanceType,
        task_id: Optional[str] = None,
        shift_applied: Optional[str] = None,
        location_lat: float = 0.0,
        location_long: float = 0.0,
        note: str = "",
    ) -> Attendance:
        record = Attendance(
            id=str(uuid.uuid4()),
            user_id=user_id,
            org_id=org_id,
            task_id=task_id,
            check_in_time=check_in_time,
            status=status,
            type=type,
            shift_applied=shift_applied,
            location_lat=float(location_lat),
            location_long=float(location_long),
            note=note,
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO attendance(id, user_id, org_id, task_id, check_in_time, status, type,
                                           shift_applied, location_lat, location_long, note, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.id,
                        user_id,
                        org_id,
                        task_id,
                        to_db(check_in_time),
                        status.value,
                        type.value,
                        shift_applied,
                        record.location_lat,
                        record.location_long,
                        note,
                        to_db(record.created_at),
                    ),
                )
            except mysql.connector.IntegrityError as exc:
                if duplicate_key_name(exc) == _OPEN_ATTENDANCE_KEY:
                    raise StateConflictError("already checked in") from exc
                raise
        return record

    def update_checkout(self, *, attendance_id: str, check_out_time: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out_time=%s
                WHERE id=%s AND check_out_time IS NULL
                """,
                (to_db(check_out_time), attendance_id),
            )
            return cur.rowcount > 0

    def get_latest_by_user(self, user_id: str) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, user_id, org_id, task_id, check_in_time, check_out_time, status, type,
                       shift_applied, location_lat, location_long, note, created_at
                FROM attendance
                WHERE user_id=%s
                ORDER BY created_at DESC, seq DESC
                LIMIT 1
                """,
                (user_id,),
            )
            r = fetchone(cur)
            return _to_attendance(r) if r else None

    def get_member_group_and_shift(self, org_id: str, user_id: str) -> Tuple[Optional[Group], Optional[Shift]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT g.id AS group_id, g.org_id AS group_org_id, g.name AS group_name,
                       g.shift_id, g.manager_id,
                       s.id AS s_id, s.name AS s_name, s.start_time, s.end_time, s.timezone,
                       s.allowed_late_minutes, s.working_days
                FROM organization_members om
                JOIN `groups` g ON g.id = om.group_id
                LEFT JOIN shifts s ON s.id = g.shift_id
                WHERE om.org_id=%s AND om.user_id=%s
                """,
                (org_id, user_id),
            )
            r = fetchone(cur)
            if not r:
                return None, None

            group = Group(
                id=r["group_id"],
                org_id=r["group_org_id"],
                name=r["group_name"],
                shift_id=r.get("shift_id"),
                manager_id=r.get("manager_id"),
            )
            if not r.get("s_id"):
                return group, None

            days = r.get("working_days") or "[]"
            shift = Shift(
                id=r["s_id"],
                org_id=r["group_org_id"],
                name=r["s_name"],
                start_time=r["start_time"],
                end_time=r["end_time"],
                timezone=r["timezone"],
                allowed_late_minutes=int(r.get("allowed_late_minutes") or 0),
                working_days=tuple(json.loads(days) if isinstance(days, (str, bytes)) else days),
            )
            return group, shift
