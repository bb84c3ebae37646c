from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Flat role set; roles do not inherit from each other."""

    STUDENT = "student"
    WARDEN = "warden"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class ComplaintCategory(str, Enum):
    MAINTENANCE = "maintenance"
    MESS = "mess"
    SECURITY = "security"
    OTHER = "other"


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class AuthEvent(str, Enum):
    """Session lifecycle events delivered to session context subscribers."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    PROFILE_UPDATED = "PROFILE_UPDATED"
