from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Priority
from .model import Notice


class NoticeRepository(Protocol):
    def list_active(self, *, now: datetime, limit: int) -> Sequence[Notice]:
        """Unexpired notices, high priority first, then newest first."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        content: str,
        priority: Priority,
        expires_at: Optional[datetime],
    ) -> Notice:
        raise NotImplementedError
