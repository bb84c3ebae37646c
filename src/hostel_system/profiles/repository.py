from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Profile


class ProfileRepository(Protocol):
    """Repository interface for profiles.

    Note (DIP): the service layer depends on this interface, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        raise NotImplementedError

    def create_profile(
        self,
        *,
        user_id: int,
        name: str,
        roll_number: str,
        phone_number: Optional[str] = None,
        role: Role = Role.STUDENT,
    ) -> Profile:
        raise NotImplementedError

    def update_fields(self, user_id: int, changes: dict) -> Optional[Profile]:
        raise NotImplementedError

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[Profile]:
        """Newest first."""

        raise NotImplementedError

    def promote_to_admin(self, *, target_user_id: int, acting_user_id: int) -> None:
        raise NotImplementedError

    def promote_to_warden(self, *, target_user_id: int, department: Optional[str], acting_user_id: int) -> None:
        raise NotImplementedError

    def demote_to_student(self, *, target_user_id: int, acting_user_id: int) -> None:
        raise NotImplementedError
