from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role
from ..users.model import User


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Organization:
    """Domain entity: a tenant owning members, groups, shifts and tasks."""

    id: str
    name: str
    email: str
    default_location_lat: float
    default_location_long: float
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "default_location_lat": self.default_location_lat,
            "default_location_long": self.default_location_long,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class OrganizationMember:
    id: str
    org_id: str
    user_id: str
    role: Role
    group_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "user_id": self.user_id,
            "role": self.role.value,
            "group_id": self.group_id,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class MemberDetail:
    """Read-model: membership joined with the member's user record."""

    member: OrganizationMember
    user: User

    def to_dict(self) -> dict:
        out = self.member.to_dict()
        out["user"] = self.user.to_dict()
        return out


@dataclass(frozen=True)
class Group:
    id: str
    org_id: str
    name: str
    shift_id: Optional[str] = None
    manager_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "name": self.name,
            "shift_id": self.shift_id,
            "manager_id": self.manager_id,
            "created_at": _iso(self.created_at),
        }
