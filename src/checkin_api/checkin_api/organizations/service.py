from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence

import structlog

from ..common.validators import FieldErrors
from ..core.constants import WORKING_DAY_NAMES
from ..core.enums import Role
from ..core.exceptions import DuplicateError, NotFoundError
from ..database.unit_of_work import TransactionManager
from ..shifts.model import Shift
from ..users.repository import UserRepository
from . import policy
from .model import Group, MemberDetail, Organization, OrganizationMember
from .repository import OrganizationRepository


def _clean_org_fields(name: Any, email: Any, lat: Any, long: Any) -> tuple[str, str, float, float]:
    errors = FieldErrors()
    name = errors.require("name", name)
    email = errors.email("email", email)
    lat = errors.latitude("default_location_lat", lat)
    long = errors.longitude("default_location_long", long)
    errors.raise_if_any()
    return name, email, lat, long


def _parse_role(value: Any, field_name: str = "role") -> Role:
    errors = FieldErrors()
    text = errors.one_of(field_name, value.value if isinstance(value, Role) else value, [r.value for r in Role])
    errors.raise_if_any()
    return Role(text)


class OrganizationService:
    """Organization lifecycle and role-hierarchy constrained membership changes."""

    def __init__(
        self,
        organizations: OrganizationRepository,
        users: UserRepository,
        transactions: TransactionManager,
        *,
        logger=None,
    ):
        self._orgs = organizations
        self._users = users
        self._tx = transactions
        self._log = logger or structlog.get_logger(__name__)

    def _membership(self, org_id: str, user_id: str) -> Optional[OrganizationMember]:
        return self._orgs.get_membership(org_id, user_id)

    def authorize_staff(self, *, caller_id: str, org_id: str) -> OrganizationMember:
        """Owner or manager membership of the caller, else AuthorizationError."""
        return policy.require_staff_admin(self._membership(org_id, caller_id))

    def _target(self, org_id: str, user_id: str) -> OrganizationMember:
        member = self._orgs.get_membership(org_id, user_id)
        if not member:
            raise NotFoundError("member not found")
        return member

    def _org_group(self, org_id: str, group_id: str) -> Group:
        group = self._orgs.get_group(group_id)
        if not group or group.org_id != org_id:
            raise NotFoundError("group not found")
        return group

    def _org_shift(self, org_id: str, shift_id: str) -> Shift:
        shift = self._orgs.get_shift(shift_id)
        if not shift or shift.org_id != org_id:
            raise NotFoundError("shift not found")
        return shift

    # -- organizations ---------------------------------------------------

    def create_organization(
        self,
        *,
        caller_id: str,
        name: str,
        email: str,
        default_location_lat: Any,
        default_location_long: Any,
    ) -> Organization:
        name, email, lat, long = _clean_org_fields(name, email, default_location_lat, default_location_long)

        with self._tx.transaction() as uow:
            org = uow.organizations.create_organization(
                name=name,
                email=email,
                default_location_lat=lat,
                default_location_long=long,
            )
            uow.organizations.add_member(org_id=org.id, user_id=caller_id, role=Role.OWNER)

        self._log.info("organization_created", org_id=org.id, owner_id=caller_id)
        return org

    def get_organization(self, org_id: str) -> Organization:
        org = self._orgs.get_by_id(org_id)
        if not org:
            raise NotFoundError("organization not found")
        return org

    def update_organization(
        self,
        *,
        caller_id: str,
        org_id: str,
        name: str,
        email: str,
        default_location_lat: Any,
        default_location_long: Any,
    ) -> Organization:
        policy.require_owner(self._membership(org_id, caller_id))
        name, email, lat, long = _clean_org_fields(name, email, default_location_lat, default_location_long)

        org = replace(
            self.get_organization(org_id),
            name=name,
            email=email,
            default_location_lat=lat,
            default_location_long=long,
        )
        self._orgs.update_organization(org)
        self._log.info("organization_updated", org_id=org_id, caller_id=caller_id)
        return org

    def delete_organization(self, *, caller_id: str, org_id: str) -> None:
        policy.require_owner(self._membership(org_id, caller_id))
        if not self._orgs.delete_organization(org_id):
            raise NotFoundError("organization not found")
        self._log.info("organization_deleted", org_id=org_id, caller_id=caller_id)

    def list_organizations(self, user_id: str) -> Sequence[Organization]:
        return list(self._orgs.list_by_member(user_id))

    # -- membership ------------------------------------------------------

    def invite_employee(
        self,
        *,
        caller_id: str,
        org_id: str,
        email: str,
        role: Any,
        group_id: Optional[str] = None,
    ) -> OrganizationMember:
        errors = FieldErrors()
        email = errors.email("email", email)
        errors.raise_if_any()
        role = _parse_role(role)

        policy.check_invite(self._membership(org_id, caller_id), role)

        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("user not found")
        if group_id:
            self._org_group(org_id, group_id)

        # The store's (org_id, user_id) unique key rejects concurrent duplicates too.
        if self._orgs.get_membership(org_id, user.id):
            raise DuplicateError("email")
        member = self._orgs.add_member(org_id=org_id, user_id=user.id, role=role, group_id=group_id or None)
        self._log.info("member_invited", org_id=org_id, user_id=user.id, role=role.value, caller_id=caller_id)
        return member

    def assign_user_to_group(self, *, caller_id: str, org_id: str, user_id: str, group_id: str) -> None:
        errors = FieldErrors()
        group_id = errors.require("group_id", group_id)
        errors.raise_if_any()

        caller = policy.require_staff_admin(self._membership(org_id, caller_id))
        target = self._target(org_id, user_id)
        policy.check_assign_group(caller, target)
        self._org_group(org_id, group_id)

        self._orgs.update_member_group(org_id, user_id, group_id)
        self._log.info("member_group_assigned", org_id=org_id, user_id=user_id, group_id=group_id)

    def get_employees(self, *, caller_id: str, org_id: str) -> Sequence[MemberDetail]:
        policy.require_staff_admin(self._membership(org_id, caller_id))
        return list(self._orgs.list_members_with_user_detail(org_id))

    def update_employee(
        self,
        *,
        caller_id: str,
        org_id: str,
        target_user_id: str,
        new_role: Any,
        new_group_id: Optional[str] = None,
    ) -> OrganizationMember:
        new_role = _parse_role(new_role)
        caller = policy.require_staff_admin(self._membership(org_id, caller_id))
        target = self._target(org_id, target_user_id)
        policy.check_update(caller, target, new_role)
        if new_group_id:
            self._org_group(org_id, new_group_id)

        updated = replace(target, role=new_role, group_id=new_group_id or None)
        self._orgs.update_member(updated)
        self._log.info(
            "member_updated",
            org_id=org_id,
            user_id=target_user_id,
            role=new_role.value,
            group_id=updated.group_id,
            caller_id=caller_id,
        )
        return updated

    def remove_employee(self, *, caller_id: str, org_id: str, target_user_id: str) -> None:
        caller = policy.require_staff_admin(self._membership(org_id, caller_id))
        target = self._target(org_id, target_user_id)
        policy.check_remove(caller, target)

        self._orgs.remove_member(org_id, target_user_id)
        self._log.info("member_removed", org_id=org_id, user_id=target_user_id, caller_id=caller_id)

    # -- structure -------------------------------------------------------

    def create_shift(
        self,
        *,
        caller_id: str,
        org_id: str,
        name: str,
        start_time: str,
        end_time: str,
        timezone: str,
        allowed_late_minutes: Any = 0,
        working_days: Sequence[str] = (),
    ) -> Shift:
        """Create a shift. ``end_time`` at or before ``start_time`` means it ends the next day."""
        errors = FieldErrors()
        name = errors.require("name", name)
        start_time = errors.time_of_day("start_time", start_time)
        end_time = errors.time_of_day("end_time", end_time)
        timezone = errors.timezone("timezone", timezone)
        allowed_late_minutes = errors.non_negative_int("allowed_late_minutes", allowed_late_minutes)
        working_days = errors.days("working_days", working_days, WORKING_DAY_NAMES)
        errors.raise_if_any()

        self.authorize_staff(caller_id=caller_id, org_id=org_id)

        shift = self._orgs.create_shift(
            org_id=org_id,
            name=name,
            start_time=start_time,
            end_time=end_time,
            timezone=timezone,
            allowed_late_minutes=allowed_late_minutes,
            working_days=working_days,
        )
        self._log.info("shift_created", org_id=org_id, shift_id=shift.id, caller_id=caller_id)
        return shift

    def create_group(
        self,
        *,
        caller_id: str,
        org_id: str,
        name: str,
        shift_id: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> Group:
        errors = FieldErrors()
        name = errors.require("name", name)
        errors.raise_if_any()

        self.authorize_staff(caller_id=caller_id, org_id=org_id)
        if shift_id:
            self._org_shift(org_id, shift_id)
        if manager_id:
            self._target(org_id, manager_id)

        group = self._orgs.create_group(org_id=org_id, name=name, shift_id=shift_id or None, manager_id=manager_id or None)
        self._log.info("group_created", org_id=org_id, group_id=group.id, caller_id=caller_id)
        return group
