from __future__ import annotations

import logging
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_email, require_min_length, require_non_empty
from ..core.enums import AuthEvent, Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository
from .context import SessionContext
from .model import Account, Identity
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: identity provider (sign up, sign in, sign out, restore).

    Every call takes the SessionContext to act on; the service itself keeps
    no per-user state.
    """

    def __init__(self, accounts: AccountRepository, profiles: ProfileRepository):
        self._accounts = accounts
        self._profiles = profiles

    def new_context(self) -> SessionContext:
        return SessionContext(self._profiles)

    def sign_up(
        self,
        *,
        email: str,
        password: str,
        name: str,
        roll_number: str,
        phone_number: Optional[str] = None,
        role: Optional[str] = None,
    ) -> Identity:
        email = require_email(email)
        require_min_length(password, "Password", 6)
        name = require_non_empty(name, "Name")
        roll_number = require_non_empty(roll_number, "Roll number")

        if role and role != Role.STUDENT.value:
            # Elevated roles are only reachable through role management.
            logger.warning("Ignoring requested role %r at sign-up for %s", role, email)

        if self._accounts.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        user_id = self._accounts.create_account(
            email=email,
            password_hash=generate_password_hash(password),
            name=name,
            roll_number=roll_number,
            phone_number=optional_text(phone_number),
        )
        logger.info("Account %s created for %s", user_id, email)
        return Identity(user_id=user_id, email=email)

    def sign_in(self, ctx: SessionContext, email: str, password: str) -> Optional[Profile]:
        account = self._accounts.get_by_email((email or "").strip().lower())
        if not account or not account.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        self._ensure_profile(account)
        ctx.apply(AuthEvent.SIGNED_IN, Identity(user_id=account.user_id, email=account.email))
        return ctx.profile

    def sign_out(self, ctx: SessionContext) -> None:
        ctx.apply(AuthEvent.SIGNED_OUT)

    def restore(self, ctx: SessionContext, user_id: Optional[int]) -> Optional[Profile]:
        """Rebuild the context from a persisted session (e.g. cookie)."""

        account = self._accounts.get_by_id(int(user_id)) if user_id else None
        if not account or not account.is_active:
            ctx.apply(AuthEvent.SIGNED_OUT)
            return None
        ctx.apply(AuthEvent.INITIAL_SESSION, Identity(user_id=account.user_id, email=account.email))
        return ctx.profile

    def _ensure_profile(self, account: Account) -> None:
        if self._profiles.get_by_id(account.user_id) is not None:
            return
        self._profiles.create_profile(
            user_id=account.user_id,
            name=account.name,
            roll_number=account.roll_number,
            phone_number=account.phone_number,
            role=Role.STUDENT,
        )
        logger.info("Profile provisioned on first sign-in for user %s", account.user_id)
