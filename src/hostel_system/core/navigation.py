from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role
from .permissions import Capability, has_capability


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    path: str
    requires: Optional[Capability] = None


MENU: tuple[MenuItem, ...] = (
    MenuItem("dashboard", "Dashboard", "/dashboard"),
    MenuItem("room-booking", "Room Booking", "/room-booking"),
    MenuItem("mess-menu", "Mess Menu", "/mess-menu"),
    MenuItem("complaints", "Complaints", "/complaints"),
    MenuItem("attendance", "Attendance", "/attendance"),
    MenuItem("user-management", "User Management", "/user-management", Capability.VIEW_USERS),
    MenuItem("admin-panel", "Admin Panel", "/admin-panel", Capability.ADMIN_PANEL),
    MenuItem("profile", "Profile", "/profile"),
)


def menu_for(role: Optional[Role]) -> list[MenuItem]:
    """Menu entries visible to ``role``; unknown profiles fall back to student."""

    role = role or Role.STUDENT
    return [item for item in MENU if item.requires is None or has_capability(role, item.requires)]
