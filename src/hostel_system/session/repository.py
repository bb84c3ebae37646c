from __future__ import annotations

from typing import Optional, Protocol

from .model import Account


class AccountRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def create_account(
        self,
        *,
        email: str,
        password_hash: str,
        name: str,
        roll_number: str,
        phone_number: Optional[str] = None,
    ) -> int:
        raise NotImplementedError
