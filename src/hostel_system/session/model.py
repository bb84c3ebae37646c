from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class Identity:
    """Who is signed in. Issued by AuthService, consumed by every request."""

    user_id: int
    email: str


@dataclass(frozen=True)
class Account:
    """Identity provider row: credentials plus the sign-up metadata used to
    create the profile on first sign-in."""

    user_id: int
    email: str
    password_hash: str
    name: str
    roll_number: str
    phone_number: Optional[str] = None
    is_active: bool = True


@dataclass
class Subscription:
    """Handle returned by SessionContext.subscribe."""

    id: int
    unsubscribe: Callable[[], None]
