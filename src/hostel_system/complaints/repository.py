from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ComplaintCategory, ComplaintStatus, Priority
from .model import Complaint


class ComplaintRepository(Protocol):
    def create(
        self,
        *,
        user_id: int,
        title: str,
        description: str,
        category: ComplaintCategory,
        priority: Priority,
    ) -> Complaint:
        raise NotImplementedError

    def get_by_id(self, complaint_id: int) -> Optional[Complaint]:
        raise NotImplementedError

    def list(self, *, user_id: Optional[int] = None) -> Sequence[Complaint]:
        """Newest first."""

        raise NotImplementedError

    def update_status(
        self,
        complaint_id: int,
        *,
        status: ComplaintStatus,
        resolved_at: Optional[datetime],
    ) -> Optional[Complaint]:
        raise NotImplementedError
