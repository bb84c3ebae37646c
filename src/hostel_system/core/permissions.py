"""Capability model.

Each role maps to an explicit set of permitted actions. All permission
decisions go through the pure functions below instead of comparing role
strings at call sites.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError


class Capability(str, Enum):
    CHECK_IN_SELF = "check_in_self"
    VIEW_OWN_ATTENDANCE = "view_own_attendance"
    VIEW_ALL_ATTENDANCE = "view_all_attendance"
    MARK_ATTENDANCE = "mark_attendance"
    MANAGE_ATTENDANCE_SETTINGS = "manage_attendance_settings"
    VIEW_USERS = "view_users"
    MANAGE_STUDENTS = "manage_students"
    PROMOTE_WARDEN = "promote_warden"
    PROMOTE_ADMIN = "promote_admin"
    EDIT_ANY_PROFILE = "edit_any_profile"
    BOOK_ROOM = "book_room"
    DECIDE_BOOKINGS = "decide_bookings"
    FILE_COMPLAINT = "file_complaint"
    RESOLVE_COMPLAINTS = "resolve_complaints"
    PUBLISH_NOTICES = "publish_notices"
    ADMIN_PANEL = "admin_panel"


_COMMON = frozenset(
    {
        Capability.VIEW_OWN_ATTENDANCE,
        Capability.FILE_COMPLAINT,
    }
)

_STAFF = _COMMON | frozenset(
    {
        Capability.VIEW_ALL_ATTENDANCE,
        Capability.MARK_ATTENDANCE,
        Capability.VIEW_USERS,
        Capability.MANAGE_STUDENTS,
        Capability.DECIDE_BOOKINGS,
        Capability.RESOLVE_COMPLAINTS,
        Capability.PUBLISH_NOTICES,
    }
)

ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.STUDENT: _COMMON | frozenset({Capability.CHECK_IN_SELF, Capability.BOOK_ROOM}),
    Role.WARDEN: _STAFF,
    Role.ADMIN: _STAFF
    | frozenset(
        {
            Capability.MANAGE_ATTENDANCE_SETTINGS,
            Capability.PROMOTE_WARDEN,
            Capability.PROMOTE_ADMIN,
            Capability.EDIT_ANY_PROFILE,
            Capability.ADMIN_PANEL,
        }
    ),
}


def capabilities_for(role: Optional[Role]) -> frozenset[Capability]:
    if role is None:
        return frozenset()
    return ROLE_CAPABILITIES.get(Role(role), frozenset())


def has_capability(role: Optional[Role], capability: Capability) -> bool:
    return capability in capabilities_for(role)


def require_capability(role: Optional[Role], capability: Capability) -> None:
    if not has_capability(role, capability):
        raise AuthorizationError("You do not have permission to perform this action")


def can_manage(actor_role: Optional[Role], target_role: Role) -> bool:
    """Whether ``actor_role`` may act on a user currently holding ``target_role``.

    Admins may target anyone; wardens only students; students nobody.
    """

    if has_capability(actor_role, Capability.PROMOTE_ADMIN):
        return True
    if has_capability(actor_role, Capability.MANAGE_STUDENTS):
        return Role(target_role) == Role.STUDENT
    return False


def assignable_roles(actor_role: Optional[Role]) -> list[Role]:
    """Roles the actor may hand out from the role dialog."""

    roles: list[Role] = []
    if has_capability(actor_role, Capability.MANAGE_STUDENTS):
        roles.append(Role.STUDENT)
    if has_capability(actor_role, Capability.PROMOTE_WARDEN):
        roles.append(Role.WARDEN)
    if has_capability(actor_role, Capability.PROMOTE_ADMIN):
        roles.append(Role.ADMIN)
    return roles
