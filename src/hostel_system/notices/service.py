from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_non_empty
from ..core.constants import DEFAULT_NOTICE_LIMIT
from ..core.enums import Priority
from ..core.exceptions import ValidationError
from ..core.permissions import Capability, require_capability
from ..profiles.model import Profile
from .model import Notice
from .repository import NoticeRepository

logger = logging.getLogger(__name__)


class NoticeService:
    def __init__(self, notices: NoticeRepository, *, limit: int = DEFAULT_NOTICE_LIMIT):
        self._notices = notices
        self._limit = int(limit)

    def active_notices(self, *, now: Optional[datetime] = None) -> Sequence[Notice]:
        return self._notices.list_active(now=now or now_local(), limit=self._limit)

    def publish(
        self,
        actor: Profile,
        *,
        title: str,
        content: str,
        priority: str = Priority.MEDIUM.value,
        expires_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Notice:
        require_capability(actor.role, Capability.PUBLISH_NOTICES)
        if expires_at is not None and expires_at <= (now or now_local()):
            raise ValidationError("Expiry must be in the future")

        notice = self._notices.create(
            title=require_non_empty(title, "Title"),
            content=require_non_empty(content, "Content"),
            priority=parse_enum(Priority, priority or Priority.MEDIUM.value, "Priority"),
            expires_at=expires_at,
        )
        logger.info("Notice %s published by user %s", notice.notice_id, actor.user_id)
        return notice
