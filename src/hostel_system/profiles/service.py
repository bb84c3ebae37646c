from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import optional_text, parse_enum
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Capability, can_manage, require_capability
from ..notifications.service import NotificationService
from ..session.context import SessionContext
from .model import ADMIN_EDITABLE_FIELDS, SELF_EDITABLE_FIELDS, Profile
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


def _clean_changes(changes: dict, allowed: frozenset) -> dict:
    unknown = set(changes) - allowed
    if unknown:
        raise ValidationError(f"Fields cannot be changed here: {', '.join(sorted(unknown))}")

    out: dict = {}
    for key, value in changes.items():
        value = optional_text(value)
        if key in {"name", "roll_number"} and not value:
            raise ValidationError(f"{key.replace('_', ' ').capitalize()} is required")
        out[key] = value
    return out


class ProfileService:
    """Use case: read and edit profiles, list users for staff screens."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def get_profile(self, user_id: int) -> Optional[Profile]:
        # A missing profile is normal for brand-new accounts.
        return self._profiles.get_by_id(int(user_id))

    def update_own_profile(self, ctx: SessionContext, changes: dict) -> Profile:
        identity = ctx.require_identity()
        cleaned = _clean_changes(changes, SELF_EDITABLE_FIELDS)
        updated = self._profiles.update_fields(identity.user_id, cleaned)
        if updated is None:
            raise NotFoundError("Profile not found")
        ctx.cache_profile(updated)
        return updated

    def update_user_profile(self, actor: Profile, user_id: int, changes: dict) -> Profile:
        require_capability(actor.role, Capability.EDIT_ANY_PROFILE)
        cleaned = _clean_changes(changes, ADMIN_EDITABLE_FIELDS)
        updated = self._profiles.update_fields(int(user_id), cleaned)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    def list_users(
        self,
        actor: Profile,
        *,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Sequence[Profile]:
        require_capability(actor.role, Capability.VIEW_USERS)

        role_filter = parse_enum(Role, role, "Role") if role and role != "all" else None
        # Wardens only see the students they can manage.
        users = [u for u in self._profiles.list_all(role=role_filter) if can_manage(actor.role, u.role)]

        needle = (search or "").strip().lower()
        if needle:
            users = [u for u in users if needle in u.name.lower() or needle in u.roll_number.lower()]
        return users

    def role_counts(self, actor: Profile) -> dict[str, int]:
        require_capability(actor.role, Capability.VIEW_USERS)
        counts = {r.value: 0 for r in Role}
        for u in self._profiles.list_all():
            counts[u.role.value] += 1
        return counts


class RoleService:
    """Use case: role transitions.

    Each transition is one server-side procedure call; the capability check
    here only stops requests the server would refuse anyway.
    """

    def __init__(self, profiles: ProfileRepository, notifications: Optional[NotificationService] = None):
        self._profiles = profiles
        self._notifications = notifications

    def _load_target(self, actor: Profile, target_user_id: int) -> Profile:
        target = self._profiles.get_by_id(int(target_user_id))
        if target is None:
            raise NotFoundError("User not found")
        if not can_manage(actor.role, target.role):
            raise AuthorizationError("You cannot change this user's role")
        return target

    def promote_to_admin(self, actor: Profile, target_user_id: int) -> Profile:
        require_capability(actor.role, Capability.PROMOTE_ADMIN)
        self._load_target(actor, target_user_id)
        self._profiles.promote_to_admin(target_user_id=int(target_user_id), acting_user_id=actor.user_id)
        return self._after_change(actor, target_user_id)

    def promote_to_warden(self, actor: Profile, target_user_id: int, department: Optional[str] = None) -> Profile:
        require_capability(actor.role, Capability.PROMOTE_WARDEN)
        self._load_target(actor, target_user_id)
        self._profiles.promote_to_warden(
            target_user_id=int(target_user_id),
            department=optional_text(department),
            acting_user_id=actor.user_id,
        )
        return self._after_change(actor, target_user_id)

    def demote_to_student(self, actor: Profile, target_user_id: int) -> Profile:
        require_capability(actor.role, Capability.MANAGE_STUDENTS)
        self._load_target(actor, target_user_id)
        self._profiles.demote_to_student(target_user_id=int(target_user_id), acting_user_id=actor.user_id)
        return self._after_change(actor, target_user_id)

    def change_role(
        self,
        actor: Profile,
        target_user_id: int,
        new_role: str,
        department: Optional[str] = None,
    ) -> Profile:
        role = parse_enum(Role, new_role, "Role")
        target = self._load_target(actor, target_user_id)
        if role == target.role and optional_text(department) == target.department:
            raise ValidationError("No changes made")

        if role == Role.ADMIN:
            return self.promote_to_admin(actor, target_user_id)
        if role == Role.WARDEN:
            return self.promote_to_warden(actor, target_user_id, department)
        return self.demote_to_student(actor, target_user_id)

    def _after_change(self, actor: Profile, target_user_id: int) -> Profile:
        updated = self._profiles.get_by_id(int(target_user_id))
        if updated is None:
            raise NotFoundError("User not found")
        logger.info("User %s set role of %s to %s", actor.user_id, updated.user_id, updated.role.value)
        if self._notifications:
            self._notifications.send(
                to=f"user:{updated.user_id}",
                subject="Your role has changed",
                message=f"Your hostel portal role is now {updated.role.value}.",
                type="role_change",
            )
        return updated
