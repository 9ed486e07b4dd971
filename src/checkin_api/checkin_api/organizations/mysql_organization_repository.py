from __future__ import annotations

import json
import uuid
from typing import Optional, Sequence

import mysql.connector

from ..common.datetime_utils import ensure_utc, to_db, utc_now
from ..core.enums import Role
from ..core.exceptions import DuplicateError
from ..database.connection import ConnectionSource
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchall, fetchone
from ..shifts.model import Shift
from ..users.model import User
from .model import Group, MemberDetail, Organization, OrganizationMember
from .repository import OrganizationRepository

_ORG_EMAIL_KEY = "uq_organizations_email"


def _to_org(r: dict) -> Organization:
    return Organization(
        id=r["id"],
        name=r["name"],
        email=r["email"],
        default_location_lat=float(r["default_location_lat"]),
        default_location_long=float(r["default_location_long"]),
        created_at=ensure_utc(r.get("created_at")),
    )


def _to_member(r: dict) -> OrganizationMember:
    return OrganizationMember(
        id=r["id"],
        org_id=r["org_id"],
        user_id=r["user_id"],
        role=Role(r["role"]),
        group_id=r.get("group_id"),
        created_at=ensure_utc(r.get("created_at")),
    )


def _to_group(r: dict) -> Group:
    return Group(
        id=r["id"],
        org_id=r["org_id"],
        name=r["name"],
        shift_id=r.get("shift_id"),
        manager_id=r.get("manager_id"),
        created_at=ensure_utc(r.get("created_at")),
    )


def _to_shift(r: dict) -> Shift:
    days = r.get("working_days") or "[]"
    return Shift(
        id=r["id"],
        org_id=r["org_id"],
        name=r["name"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        timezone=r["timezone"],
        allowed_late_minutes=int(r.get("allowed_late_minutes") or 0),
        working_days=tuple(json.loads(days) if isinstance(days, (str, bytes)) else days),
        created_at=ensure_utc(r.get("created_at")),
    )


def _raise_if_org_email_taken(exc: mysql.connector.IntegrityError) -> None:
    if duplicate_key_name(exc) == _ORG_EMAIL_KEY:
        raise DuplicateError("email") from exc


class MySQLOrganizationRepository(OrganizationRepository):
    def __init__(self, conn_factory: ConnectionSource):
        self._conn_factory = conn_factory

    def create_organization(
        self,
        *,
        name: str,
        email: str,
        default_location_lat: float,
        default_location_long: float,
    ) -> Organization:
        org = Organization(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            default_location_lat=float(default_location_lat),
            default_location_long=float(default_location_long),
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO organizations(id, name, email, default_location_lat, default_location_long, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (org.id, org.name, org.email, org.default_location_lat, org.default_location_long, to_db(org.created_at)),
                )
            except mysql.connector.IntegrityError as exc:
                _raise_if_org_email_taken(exc)
                raise
        return org

    def get_by_id(self, org_id: str) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, email, default_location_lat, default_location_long, created_at
                FROM organizations
                WHERE id=%s
                """,
                (org_id,),
            )
            r = fetchone(cur)
            return _to_org(r) if r else None

    def update_organization(self, org: Organization) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    UPDATE organizations
                    SET name=%s, email=%s, default_location_lat=%s, default_location_long=%s
                    WHERE id=%s
                    """,
                    (org.name, org.email, org.default_location_lat, org.default_location_long, org.id),
                )
            except mysql.connector.IntegrityError as exc:
                _raise_if_org_email_taken(exc)
                raise
            return cur.rowcount > 0

    def delete_organization(self, org_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM organizations WHERE id=%s", (org_id,))
            return cur.rowcount > 0

    def list_by_member(self, user_id: str) -> Sequence[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DISTINCT o.id, o.name, o.email, o.default_location_lat, o.default_location_long, o.created_at
                FROM organizations o
                JOIN organization_members om ON om.org_id = o.id
                WHERE om.user_id=%s
                """,
                (user_id,),
            )
            return [_to_org(r) for r in fetchall(cur)]

    def get_membership(self, org_id: str, user_id: str) -> Optional[OrganizationMember]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, org_id, user_id, role, group_id, created_at
                FROM organization_members
                WHERE org_id=%s AND user_id=%s
                """,
                (org_id, user_id),
            )
            r = fetchone(cur)
            return _to_member(r) if r else None

    def add_member(self, *, org_id: str, user_id: str, role: Role, group_id: Optional[str] = None) -> OrganizationMember:
        member = OrganizationMember(
            id=str(uuid.uuid4()),
            org_id=org_id,
            user_id=user_id,
            role=role,
            group_id=group_id,
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO organization_members(id, org_id, user_id, role, group_id, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (member.id, org_id, user_id, role.value, group_id, to_db(member.created_at)),
                )
            except mysql.connector.IntegrityError as exc:
                if duplicate_key_name(exc) == "uq_members_org_user":
                    raise DuplicateError("email") from exc
                raise
        return member

    def update_member(self, member: OrganizationMember) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE organization_members
                SET role=%s, group_id=%s
                WHERE org_id=%s AND user_id=%s
                """,
                (member.role.value, member.group_id, member.org_id, member.user_id),
            )
            return cur.rowcount > 0

    def remove_member(self, org_id: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM organization_members WHERE org_id=%s AND user_id=%s", (org_id, user_id))
            return cur.rowcount > 0

    def list_members_with_user_detail(self, org_id: str) -> Sequence[MemberDetail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    om.id, om.org_id, om.user_id, om.role, om.group_id, om.created_at,
                    u.full_name, u.email, u.password_hash, u.phone_number, u.created_at AS user_created_at
                FROM organization_members om
                JOIN users u ON u.id = om.user_id
                WHERE om.org_id=%s
                ORDER BY om.created_at ASC
                """,
                (org_id,),
            )
            rows = fetchall(cur)
            return [
                MemberDetail(
                    member=_to_member(r),
                    user=User(
                        id=r["user_id"],
                        full_name=r["full_name"],
                        email=r["email"],
                        password_hash=r["password_hash"],
                        phone_number=r.get("phone_number") or "",
                        created_at=ensure_utc(r.get("user_created_at")),
                    ),
                )
                for r in rows
            ]

    def create_shift(
        self,
        *,
        org_id: str,
        name: str,
        start_time: str,
        end_time: str,
        timezone: str,
        allowed_late_minutes: int,
        working_days: Sequence[str],
    ) -> Shift:
        shift = Shift(
            id=str(uuid.uuid4()),
            org_id=org_id,
            name=name,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone,
            allowed_late_minutes=int(allowed_late_minutes),
            working_days=tuple(working_days),
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(id, org_id, name, start_time, end_time, timezone, allowed_late_minutes, working_days, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    shift.id,
                    org_id,
                    name,
                    start_time,
                    end_time,
                    timezone,
                    shift.allowed_late_minutes,
                    json.dumps(list(shift.working_days)),
                    to_db(shift.created_at),
                ),
            )
        return shift

    def create_group(
        self,
        *,
        org_id: str,
        name: str,
        shift_id: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> Group:
        group = Group(
            id=str(uuid.uuid4()),
            org_id=org_id,
            name=name,
            shift_id=shift_id,
            manager_id=manager_id,
            created_at=utc_now(),
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO `groups`(id, org_id, name, shift_id, manager_id, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (group.id, org_id, name, shift_id, manager_id, to_db(group.created_at)),
            )
        return group

    def update_member_group(self, org_id: str, user_id: str, group_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE organization_members
                SET group_id=%s
                WHERE org_id=%s AND user_id=%s
                """,
                (group_id, org_id, user_id),
            )
            return cur.rowcount > 0

    def get_group(self, group_id: str) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, org_id, name, shift_id, manager_id, created_at
                FROM `groups`
                WHERE id=%s
                """,
                (group_id,),
            )
            r = fetchone(cur)
            return _to_group(r) if r else None

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, org_id, name, start_time, end_time, timezone, allowed_late_minutes, working_days, created_at
                FROM shifts
                WHERE id=%s
                """,
                (shift_id,),
            )
            r = fetchone(cur)
            return _to_shift(r) if r else None
