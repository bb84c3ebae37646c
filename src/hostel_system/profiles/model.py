from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role

# Fields a user may change on their own profile.
SELF_EDITABLE_FIELDS = frozenset({"name", "phone_number", "hostel_block", "room_number", "avatar_url"})
# Admins may additionally fix identity fields; role changes go through RoleService.
ADMIN_EDITABLE_FIELDS = SELF_EDITABLE_FIELDS | frozenset({"roll_number", "department"})


@dataclass(frozen=True)
class Profile:
    """Domain entity: a hostel resident or staff member.

    Created on first sign-in, never deleted.
    """

    user_id: int
    name: str
    roll_number: str
    role: Role = Role.STUDENT
    phone_number: Optional[str] = None
    hostel_block: Optional[str] = None
    room_number: Optional[str] = None
    avatar_url: Optional[str] = None
    department: Optional[str] = None
