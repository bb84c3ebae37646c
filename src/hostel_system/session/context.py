from __future__ import annotations

import itertools
import logging
from typing import Callable, Optional

from ..core.enums import AuthEvent, Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository
from .model import Identity, Subscription

logger = logging.getLogger(__name__)

Listener = Callable[[AuthEvent, "SessionContext"], None]


class SessionContext:
    """Current identity plus its cached profile.

    One context per client (per request in the web layer). It is passed
    explicitly to whatever needs the caller; interested parties subscribe to
    it and must unsubscribe when they are done.
    """

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles
        self._listeners: dict[int, Listener] = {}
        self._ids = itertools.count(1)
        self.identity: Optional[Identity] = None
        self.profile: Optional[Profile] = None

    # lifecycle

    def subscribe(self, listener: Listener) -> Subscription:
        sub_id = next(self._ids)
        self._listeners[sub_id] = listener
        return Subscription(id=sub_id, unsubscribe=lambda: self._listeners.pop(sub_id, None))

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def apply(self, event: AuthEvent, identity: Optional[Identity] = None) -> None:
        """Move the context to the state implied by ``event`` and notify subscribers."""

        if event == AuthEvent.SIGNED_OUT or identity is None:
            self.identity = None
            self.profile = None
        elif event == AuthEvent.PROFILE_UPDATED:
            self.identity = identity
        else:
            self.identity = identity
            self.profile = self._profiles.get_by_id(identity.user_id)
            if self.profile is None:
                # Brand-new accounts have no profile until it is provisioned.
                logger.info("No profile yet for user %s", identity.user_id)

        for listener in list(self._listeners.values()):
            listener(event, self)

    def cache_profile(self, profile: Profile) -> None:
        if self.identity is None or profile.user_id != self.identity.user_id:
            return
        self.profile = profile
        self.apply(AuthEvent.PROFILE_UPDATED, self.identity)

    # accessors

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def role(self) -> Optional[Role]:
        return self.profile.role if self.profile else None

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise AuthenticationError("Please sign in to continue")
        return self.identity

    def require_profile(self) -> Profile:
        self.require_identity()
        if self.profile is None:
            raise AuthorizationError("Your profile is not set up yet")
        return self.profile
