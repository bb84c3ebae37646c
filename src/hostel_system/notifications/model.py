from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class NotificationReceipt:
    success: bool
    to: str
    subject: str
    type: str
    sent_at: Optional[datetime] = None
    error: Optional[str] = None
