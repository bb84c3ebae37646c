from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Priority

PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class Notice:
    notice_id: int
    title: str
    content: str
    priority: Priority = Priority.MEDIUM
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now
