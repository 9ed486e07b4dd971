from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, AttendanceType


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Task:
    """Domain entity: an org-scoped work item, optionally geofenced."""

    id: str
    org_id: str
    title: str
    assigned_user_id: Optional[str] = None
    geofencing_enabled: bool = False
    location_name: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    radius_meters: int = 0
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "title": self.title,
            "assigned_user_id": self.assigned_user_id,
            "geofencing_enabled": self.geofencing_enabled,
            "location_name": self.location_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius_meters": self.radius_meters,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one check-in event; open while check_out_time is None."""

    id: str
    user_id: str
    org_id: str
    check_in_time: datetime
    status: AttendanceStatus
    type: AttendanceType
    task_id: Optional[str] = None
    check_out_time: Optional[datetime] = None
    shift_applied: Optional[str] = None
    location_lat: float = 0.0
    location_long: float = 0.0
    note: str = ""
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "org_id": self.org_id,
            "task_id": self.task_id,
            "check_in_time": _iso(self.check_in_time),
            "check_out_time": _iso(self.check_out_time),
            "status": self.status.value,
            "type": self.type.value,
            "shift_applied": self.shift_applied,
            "location_lat": self.location_lat,
            "location_long": self.location_long,
            "note": self.note,
            "created_at": _iso(self.created_at),
        }
