from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from ..common.datetime_utils import utc_now
from ..common.validators import FieldErrors
from ..core.enums import AttendanceStatus, AttendanceType
from ..core.exceptions import NotFoundError, StateConflictError
from ..database.unit_of_work import TransactionManager
from ..organizations import policy
from ..organizations.repository import OrganizationRepository
from .factory import AttendanceStrategyFactory
from .geofence import GeofenceValidator, NoopGeofence
from .model import Attendance, Task
from .repository import AttendanceRepository


class AttendanceService:
    """Check-in/check-out state machine: a user is IN while their latest row is open."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        transactions: TransactionManager,
        organizations: OrganizationRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        geofence: GeofenceValidator | None = None,
        clock: Callable[[], datetime] = utc_now,
        logger=None,
    ):
        self._attendance = attendance
        self._tx = transactions
        self._orgs = organizations
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._geofence = geofence or NoopGeofence()
        self._clock = clock
        self._log = logger or structlog.get_logger(__name__)

    def create_task(
        self,
        *,
        caller_id: str,
        org_id: str,
        title: str,
        assigned_user_id: Optional[str] = None,
        geofencing_enabled: bool = False,
        location_name: str = "",
        latitude: Any = 0.0,
        longitude: Any = 0.0,
        radius_meters: Any = 0,
    ) -> Task:
        errors = FieldErrors()
        title = errors.require("title", title)
        latitude = errors.latitude("latitude", 0.0 if latitude is None else latitude)
        longitude = errors.longitude("longitude", 0.0 if longitude is None else longitude)
        radius_meters = errors.non_negative_int("radius_meters", radius_meters)
        errors.raise_if_any()

        policy.require_staff_admin(self._orgs.get_membership(org_id, caller_id))

        task = self._attendance.create_task(
            org_id=org_id,
            title=title,
            assigned_user_id=assigned_user_id or None,
            geofencing_enabled=bool(geofencing_enabled),
            location_name=(location_name or "").strip(),
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
        )
        self._log.info("task_created", org_id=org_id, task_id=task.id, geofencing=task.geofencing_enabled, caller_id=caller_id)
        return task

    def check_in(
        self,
        *,
        caller_id: str,
        org_id: str,
        latitude: Any,
        longitude: Any,
        task_id: Optional[str] = None,
        note: str = "",
    ) -> Attendance:
        errors = FieldErrors()
        org_id = errors.require("org_id", org_id)
        latitude = errors.latitude("latitude", latitude)
        longitude = errors.longitude("longitude", longitude)
        errors.raise_if_any()
        note = (note or "").strip()

        with self._tx.transaction() as uow:
            repo = uow.attendance
            repo.lock_user(caller_id)

            latest = repo.get_latest_by_user(caller_id)
            if latest and latest.is_open:
                raise StateConflictError("already checked in")

            now = self._clock()
            status = AttendanceStatus.PRESENT
            shift_applied = None

            if task_id:
                policy.require_member(uow.organizations.get_membership(org_id, caller_id))
                task = repo.get_task_by_id(task_id)
                if not task or task.org_id != org_id:
                    raise NotFoundError("task not found")
                if task.geofencing_enabled:
                    self._geofence.validate(task=task, latitude=latitude, longitude=longitude)
                kind = AttendanceType.TASK
            else:
                kind = AttendanceType.GENERAL
                group, shift = repo.get_member_group_and_shift(org_id, caller_id)
                if not group:
                    raise StateConflictError("user not in any group")
                if shift:
                    shift_applied = shift.name
                    decision = self._factory.for_checkin(now=now, shift=shift).decide_checkin(now=now, shift=shift)
                    status = decision.status
                    note = "; ".join(part for part in (note, decision.note) if part)

            record = repo.create_attendance(
                user_id=caller_id,
                org_id=org_id,
                check_in_time=now,
                status=status,
                type=kind,
                task_id=task_id or None,
                shift_applied=shift_applied,
                location_lat=latitude,
                location_long=longitude,
                note=note,
            )

        self._log.info(
            "checked_in",
            user_id=caller_id,
            org_id=org_id,
            attendance_id=record.id,
            status=record.status.value,
            type=record.type.value,
        )
        return record

    def check_out(self, *, caller_id: str) -> Attendance:
        with self._tx.transaction() as uow:
            repo = uow.attendance
            repo.lock_user(caller_id)

            latest = repo.get_latest_by_user(caller_id)
            if not latest or not latest.is_open:
                raise StateConflictError("not checked in")

            check_out_time = max(self._clock(), latest.check_in_time)
            if not repo.update_checkout(attendance_id=latest.id, check_out_time=check_out_time):
                raise StateConflictError("not checked in")

        self._log.info("checked_out", user_id=caller_id, attendance_id=latest.id)
        return replace(latest, check_out_time=check_out_time)

    def get_current_status(self, caller_id: str) -> Optional[Attendance]:
        latest = self._attendance.get_latest_by_user(caller_id)
        if latest and latest.is_open:
            return latest
        return None
