from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ComplaintCategory, ComplaintStatus, Priority


@dataclass(frozen=True)
class Complaint:
    complaint_id: int
    user_id: int
    title: str
    description: str
    category: ComplaintCategory
    status: ComplaintStatus = ComplaintStatus.PENDING
    priority: Priority = Priority.MEDIUM
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
