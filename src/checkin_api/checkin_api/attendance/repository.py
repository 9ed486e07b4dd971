from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Tuple

from ..core.enums import AttendanceStatus, AttendanceType
from ..organizations.model import Group
from ..shifts.model import Shift
from .model import Attendance, Task


class AttendanceRepository(Protocol):
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
        raise NotImplementedError

    def get_task_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def lock_user(self, user_id: str) -> None:
        """Serialize attendance writes for one user until the transaction ends."""

        raise NotImplementedError

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
        """Insert an open attendance row.

        Raises StateConflictError when the user already has an open row.
        """

        raise NotImplementedError

    def update_checkout(self, *, attendance_id: str, check_out_time: datetime) -> bool:
        """Set check_out_time only; every other column is immutable."""

        raise NotImplementedError

    def get_latest_by_user(self, user_id: str) -> Optional[Attendance]:
        """Latest attendance by creation time, or None."""

        raise NotImplementedError

    def get_member_group_and_shift(self, org_id: str, user_id: str) -> Tuple[Optional[Group], Optional[Shift]]:
        raise NotImplementedError
