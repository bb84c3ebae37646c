from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_non_empty
from ..core.enums import ComplaintCategory, ComplaintStatus, Priority
from ..core.exceptions import NotFoundError
from ..core.permissions import Capability, has_capability, require_capability
from ..notifications.service import NotificationService
from ..profiles.model import Profile
from .model import Complaint
from .repository import ComplaintRepository

logger = logging.getLogger(__name__)


class ComplaintService:
    def __init__(self, complaints: ComplaintRepository, notifications: Optional[NotificationService] = None):
        self._complaints = complaints
        self._notifications = notifications

    def create_complaint(
        self,
        actor: Profile,
        *,
        title: str,
        description: str,
        category: str,
        priority: str = Priority.MEDIUM.value,
    ) -> Complaint:
        require_capability(actor.role, Capability.FILE_COMPLAINT)
        complaint = self._complaints.create(
            user_id=actor.user_id,
            title=require_non_empty(title, "Title"),
            description=require_non_empty(description, "Description"),
            category=parse_enum(ComplaintCategory, category, "Category"),
            priority=parse_enum(Priority, priority or Priority.MEDIUM.value, "Priority"),
        )
        logger.info("Complaint %s filed by user %s", complaint.complaint_id, actor.user_id)
        return complaint

    def list_complaints(self, actor: Profile) -> Sequence[Complaint]:
        if has_capability(actor.role, Capability.RESOLVE_COMPLAINTS):
            return self._complaints.list()
        return self._complaints.list(user_id=actor.user_id)

    def update_status(
        self,
        actor: Profile,
        complaint_id: int,
        status: str,
        *,
        now: Optional[datetime] = None,
    ) -> Complaint:
        require_capability(actor.role, Capability.RESOLVE_COMPLAINTS)
        status_enum = parse_enum(ComplaintStatus, status, "Status")

        current = self._complaints.get_by_id(int(complaint_id))
        if current is None:
            raise NotFoundError("Complaint not found")

        resolved_at = (now or now_local()) if status_enum == ComplaintStatus.RESOLVED else None
        updated = self._complaints.update_status(current.complaint_id, status=status_enum, resolved_at=resolved_at)
        if updated is None:
            raise NotFoundError("Complaint not found")

        logger.info("Complaint %s moved to %s by user %s", updated.complaint_id, updated.status.value, actor.user_id)
        if self._notifications and updated.status != current.status:
            self._notifications.send(
                to=f"user:{updated.user_id}",
                subject=f"Complaint update: {updated.title}",
                message=f"Your complaint is now {updated.status.value}.",
                type="complaint_status",
            )
        return updated
