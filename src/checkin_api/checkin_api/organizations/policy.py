"""Role hierarchy rules for membership mutations.

OWNER > MANAGER > EMPLOYEE. Managers may only act on employees and may only
grant the employee role; the owner role can never be taken away or removed.
Every check raises AuthorizationError with a rule-specific message.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .model import OrganizationMember

STAFF_ADMINS = frozenset({Role.OWNER, Role.MANAGER})


def require_member(caller: Optional[OrganizationMember]) -> OrganizationMember:
    if caller is None:
        raise AuthorizationError("not a member of this organization")
    return caller


def require_owner(caller: Optional[OrganizationMember]) -> OrganizationMember:
    if caller is None or caller.role != Role.OWNER:
        raise AuthorizationError("unauthorized")
    return caller


def require_staff_admin(caller: Optional[OrganizationMember]) -> OrganizationMember:
    if caller is None or caller.role not in STAFF_ADMINS:
        raise AuthorizationError("unauthorized")
    return caller


def check_update(caller: OrganizationMember, target: OrganizationMember, new_role: Role) -> None:
    require_staff_admin(caller)

    if caller.role == Role.MANAGER:
        if target.role in STAFF_ADMINS:
            raise AuthorizationError("manager cannot update owner or other managers")
        if new_role in STAFF_ADMINS:
            raise AuthorizationError("manager cannot promote to owner or manager")

    if target.role == Role.OWNER and new_role != Role.OWNER:
        raise AuthorizationError("cannot demote owner")


def check_remove(caller: OrganizationMember, target: OrganizationMember) -> None:
    require_staff_admin(caller)

    if target.role == Role.OWNER:
        raise AuthorizationError("cannot remove owner")
    if caller.role == Role.MANAGER and target.role == Role.MANAGER:
        raise AuthorizationError("manager cannot remove owner or other managers")


def check_invite(caller: OrganizationMember, role: Role) -> None:
    require_staff_admin(caller)

    if caller.role == Role.MANAGER and role != Role.EMPLOYEE:
        raise AuthorizationError("manager can only invite employees")


def check_assign_group(caller: OrganizationMember, target: OrganizationMember) -> None:
    require_staff_admin(caller)

    if caller.role == Role.MANAGER and target.role in STAFF_ADMINS:
        raise AuthorizationError("manager cannot update owner or other managers")
