from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Membership role inside an organization (OWNER > MANAGER > EMPLOYEE)."""

    OWNER = "OWNER"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class AttendanceStatus(str, Enum):
    """Attendance classification persisted with each check-in."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"


class AttendanceType(str, Enum):
    GENERAL = "GENERAL"
    TASK = "TASK"
