from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from ..shifts.model import Shift
from .model import Group, MemberDetail, Organization, OrganizationMember


class OrganizationRepository(Protocol):
    def create_organization(
        self,
        *,
        name: str,
        email: str,
        default_location_lat: float,
        default_location_long: float,
    ) -> Organization:
        """Insert an organization.

        Raises DuplicateError(field="email") when the email is already registered.
        """

        raise NotImplementedError

    def get_by_id(self, org_id: str) -> Optional[Organization]:
        raise NotImplementedError

    def update_organization(self, org: Organization) -> bool:
        raise NotImplementedError

    def delete_organization(self, org_id: str) -> bool:
        raise NotImplementedError

    def list_by_member(self, user_id: str) -> Sequence[Organization]:
        raise NotImplementedError

    def get_membership(self, org_id: str, user_id: str) -> Optional[OrganizationMember]:
        raise NotImplementedError

    def add_member(self, *, org_id: str, user_id: str, role: Role, group_id: Optional[str] = None) -> OrganizationMember:
        raise NotImplementedError

    def update_member(self, member: OrganizationMember) -> bool:
        """Persist role and group_id of an existing membership."""

        raise NotImplementedError

    def remove_member(self, org_id: str, user_id: str) -> bool:
        raise NotImplementedError

    def list_members_with_user_detail(self, org_id: str) -> Sequence[MemberDetail]:
        raise NotImplementedError

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
        raise NotImplementedError

    def create_group(
        self,
        *,
        org_id: str,
        name: str,
        shift_id: Optional[str] = None,
        manager_id: Optional[str] = None,
    ) -> Group:
        raise NotImplementedError

    def update_member_group(self, org_id: str, user_id: str, group_id: str) -> bool:
        raise NotImplementedError

    def get_group(self, group_id: str) -> Optional[Group]:
        raise NotImplementedError

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        raise NotImplementedError
