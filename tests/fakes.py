"""In-memory implementations of the repository protocols.

All repositories share one ``InMemoryStore`` so a transaction can snapshot
and restore everything at once. The store enforces the same unique keys as
the MySQL schema.
"""

from __future__ import annotations

import copy
import itertools
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterator, Optional, Sequence

from src.checkin_api.checkin_api.attendance.model import Attendance, Task
from src.checkin_api.checkin_api.common.datetime_utils import utc_now
from src.checkin_api.checkin_api.core.enums import AttendanceStatus, AttendanceType, Role
from src.checkin_api.checkin_api.core.exceptions import DuplicateError, StateConflictError
from src.checkin_api.checkin_api.database.unit_of_work import TransactionManager, UnitOfWork
from src.checkin_api.checkin_api.organizations.model import Group, MemberDetail, Organization, OrganizationMember
from src.checkin_api.checkin_api.reports.model import GroupAttendanceCounts
from src.checkin_api.checkin_api.shifts.model import Shift
from src.checkin_api.checkin_api.users.model import User


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class StoreData:
    users: dict[str, User] = field(default_factory=dict)
    organizations: dict[str, Organization] = field(default_factory=dict)
    members: dict[tuple[str, str], OrganizationMember] = field(default_factory=dict)
    shifts: dict[str, Shift] = field(default_factory=dict)
    groups: dict[str, Group] = field(default_factory=dict)
    tasks: dict[str, Task] = field(default_factory=dict)
    # (seq, record) in insertion order
    attendance: list[tuple[int, Attendance]] = field(default_factory=list)


class InMemoryStore:
    def __init__(self):
        self.data = StoreData()
        self.lock = threading.RLock()
        self._seq = itertools.count(1)
        self._faults: dict[str, Exception] = {}

    def next_seq(self) -> int:
        return next(self._seq)

    def fail_on(self, operation: str, exc: Exception) -> None:
        """Make the next call of ``operation`` raise ``exc``."""
        self._faults[operation] = exc

    def check_fault(self, operation: str) -> None:
        exc = self._faults.pop(operation, None)
        if exc is not None:
            raise exc


class InMemoryUsers:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def create_user(self, *, full_name: str, email: str, password_hash: str, phone_number: str) -> User:
        with self._store.lock:
            data = self._store.data
            if any(u.email == email for u in data.users.values()):
                raise DuplicateError("email")
            user = User(
                id=_new_id(),
                full_name=full_name,
                email=email,
                password_hash=password_hash,
                phone_number=phone_number,
                created_at=utc_now(),
            )
            data.users[user.id] = user
            return user

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._store.data.users.values() if u.email == email), None)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._store.data.users.get(user_id)

    def update_user(self, user: User) -> bool:
        with self._store.lock:
            if user.id not in self._store.data.users:
                return False
            self._store.data.users[user.id] = user
            return True


class InMemoryOrganizations:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _email_taken(self, email: str, *, except_id: Optional[str] = None) -> bool:
        return any(o.email == email and o.id != except_id for o in self._store.data.organizations.values())

    def create_organization(
        self,
        *,
        name: str,
        email: str,
        default_location_lat: float,
        default_location_long: float,
    ) -> Organization:
        with self._store.lock:
            self._store.check_fault("create_organization")
            if self._email_taken(email):
                raise DuplicateError("email")
            org = Organization(
                id=_new_id(),
                name=name,
                email=email,
                default_location_lat=float(default_location_lat),
                default_location_long=float(default_location_long),
                created_at=utc_now(),
            )
            self._store.data.organizations[org.id] = org
            return org

    def get_by_id(self, org_id: str) -> Optional[Organization]:
        return self._store.data.organizations.get(org_id)

    def update_organization(self, org: Organization) -> bool:
        with self._store.lock:
            if org.id not in self._store.data.organizations:
                return False
            if self._email_taken(org.email, except_id=org.id):
                raise DuplicateError("email")
            self._store.data.organizations[org.id] = org
            return True

    def delete_organization(self, org_id: str) -> bool:
        with self._store.lock:
            data = self._store.data
            if data.organizations.pop(org_id, None) is None:
                return False
            data.members = {k: m for k, m in data.members.items() if m.org_id != org_id}
            data.shifts = {k: s for k, s in data.shifts.items() if s.org_id != org_id}
            data.groups = {k: g for k, g in data.groups.items() if g.org_id != org_id}
            data.tasks = {k: t for k, t in data.tasks.items() if t.org_id != org_id}
            data.attendance = [(seq, a) for seq, a in data.attendance if a.org_id != org_id]
            return True

    def list_by_member(self, user_id: str) -> Sequence[Organization]:
        data = self._store.data
        org_ids = [m.org_id for m in data.members.values() if m.user_id == user_id]
        return [data.organizations[i] for i in org_ids if i in data.organizations]

    def get_membership(self, org_id: str, user_id: str) -> Optional[OrganizationMember]:
        return self._store.data.members.get((org_id, user_id))

    def add_member(self, *, org_id: str, user_id: str, role: Role, group_id: Optional[str] = None) -> OrganizationMember:
        with self._store.lock:
            self._store.check_fault("add_member")
            if (org_id, user_id) in self._store.data.members:
                raise DuplicateError("email")
            member = OrganizationMember(
                id=_new_id(),
                org_id=org_id,
                user_id=user_id,
                role=role,
                group_id=group_id,
                created_at=utc_now(),
            )
            self._store.data.members[(org_id, user_id)] = member
            return member

    def update_member(self, member: OrganizationMember) -> bool:
        with self._store.lock:
            key = (member.org_id, member.user_id)
            current = self._store.data.members.get(key)
            if not current:
                return False
            self._store.data.members[key] = replace(current, role=member.role, group_id=member.group_id)
            return True

    def remove_member(self, org_id: str, user_id: str) -> bool:
        with self._store.lock:
            return self._store.data.members.pop((org_id, user_id), None) is not None

    def list_members_with_user_detail(self, org_id: str) -> Sequence[MemberDetail]:
        data = self._store.data
        return [
            MemberDetail(member=m, user=data.users[m.user_id])
            for m in data.members.values()
            if m.org_id == org_id and m.user_id in data.users
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
        with self._store.lock:
            shift = Shift(
                id=_new_id(),
                org_id=org_id,
                name=name,
                start_time=start_time,
                end_time=end_time,
                timezone=timezone,
                allowed_late_minutes=int(allowed_late_minutes),
                working_days=tuple(working_days),
                created_at=utc_now(),
            )
            self._store.data.shifts[shift.id] = shift
            return shift

    def create_group(
        self,
        *,
        org_id: str,
        name: str,
        shift_id: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> Group:
        with self._store.lock:
            group = Group(
                id=_new_id(),
                org_id=org_id,
                name=name,
                shift_id=shift_id,
                manager_id=manager_id,
                created_at=utc_now(),
            )
            self._store.data.groups[group.id] = group
            return group

    def update_member_group(self, org_id: str, user_id: str, group_id: str) -> bool:
        with self._store.lock:
            current = self._store.data.members.get((org_id, user_id))
            if not current:
                return False
            self._store.data.members[(org_id, user_id)] = replace(current, group_id=group_id)
            return True

    def get_group(self, group_id: str) -> Optional[Group]:
        return self._store.data.groups.get(group_id)

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        return self._store.data.shifts.get(shift_id)


class InMemoryAttendance:
    def __init__(self, store: InMemoryStore):
        self._store = store
        self.locked_users: list[str] = []

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
        with self._store.lock:
            task = Task(
                id=_new_id(),
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
            self._store.data.tasks[task.id] = task
            return task

    def get_task_by_id(self, task_id: str) -> Optional[Task]:
        return self._store.data.tasks.get(task_id)

    def lock_user(self, user_id: str) -> None:
        # Transactions already hold the store-wide lock.
        self.locked_users.append(user_id)

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
        with self._store.lock:
            self._store.check_fault("create_attendance")
            data = self._store.data
            if any(a.user_id == user_id and a.is_open for _, a in data.attendance):
                raise StateConflictError("already checked in")
            record = Attendance(
                id=_new_id(),
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
            data.attendance.append((self._store.next_seq(), record))
            return record

    def update_checkout(self, *, attendance_id: str, check_out_time: datetime) -> bool:
        with self._store.lock:
            rows = self._store.data.attendance
            for i, (seq, a) in enumerate(rows):
                if a.id == attendance_id and a.is_open:
                    rows[i] = (seq, replace(a, check_out_time=check_out_time))
                    return True
            return False

    def get_latest_by_user(self, user_id: str) -> Optional[Attendance]:
        rows = [(a.created_at, seq, a) for seq, a in self._store.data.attendance if a.user_id == user_id]
        if not rows:
            return None
        return max(rows, key=lambda r: (r[0], r[1]))[2]

    def get_member_group_and_shift(self, org_id: str, user_id: str) -> tuple[Optional[Group], Optional[Shift]]:
        data = self._store.data
        member = data.members.get((org_id, user_id))
        group = data.groups.get(member.group_id) if member and member.group_id else None
        if not group:
            return None, None
        return group, data.shifts.get(group.shift_id) if group.shift_id else None

    # test helper
    def all_for_user(self, user_id: str) -> list[Attendance]:
        return [a for _, a in self._store.data.attendance if a.user_id == user_id]


class InMemoryReports:
    def __init__(self, store: InMemoryStore):
        self._store = store

    def get_group_performance(self, group_id: str) -> Optional[GroupAttendanceCounts]:
        data = self._store.data
        group = data.groups.get(group_id)
        if not group:
            return None
        shift = data.shifts.get(group.shift_id) if group.shift_id else None
        user_ids = {m.user_id for m in data.members.values() if m.group_id == group_id}
        statuses = [a.status for _, a in data.attendance if a.user_id in user_ids and a.org_id == group.org_id]
        return GroupAttendanceCounts(
            org_id=group.org_id,
            group_name=group.name,
            shift_name=shift.name if shift else None,
            present=statuses.count(AttendanceStatus.PRESENT),
            late=statuses.count(AttendanceStatus.LATE),
            absent=statuses.count(AttendanceStatus.ABSENT),
        )

    # test helper
    def add_record(self, *, user_id: str, org_id: str, status: AttendanceStatus, closed: bool = True) -> None:
        now = utc_now()
        record = Attendance(
            id=_new_id(),
            user_id=user_id,
            org_id=org_id,
            check_in_time=now,
            check_out_time=now if closed else None,
            status=status,
            type=AttendanceType.GENERAL,
            created_at=now,
        )
        with self._store.lock:
            self._store.data.attendance.append((self._store.next_seq(), record))


class InMemoryTransactionManager(TransactionManager):
    """Serializes transactions on the store lock; restores a snapshot on error."""

    def __init__(self, store: InMemoryStore):
        self._store = store
        self.commits = 0
        self.rollbacks = 0

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        with self._store.lock:
            snapshot = copy.deepcopy(self._store.data)
            uow = UnitOfWork(
                users=InMemoryUsers(self._store),
                organizations=InMemoryOrganizations(self._store),
                attendance=InMemoryAttendance(self._store),
                reports=InMemoryReports(self._store),
            )
            try:
                yield uow
            except Exception:
                self._store.data = snapshot
                self.rollbacks += 1
                raise
            self.commits += 1
