from __future__ import annotations

import logging
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from .model import NotificationReceipt

logger = logging.getLogger(__name__)

Transport = Callable[[str, str, str, str], None]


class NotificationService:
    """Best-effort outbound notifications.

    Delivery is not part of this service: requests are logged and handed to
    an optional transport. Failures are logged and reported in the receipt,
    never raised.
    """

    def __init__(self, transport: Optional[Transport] = None):
        self._transport = transport

    def send(self, *, to: str, subject: str, message: str, type: str) -> NotificationReceipt:
        logger.info("Notification request: %s to %s", type, to)
        logger.info("Subject: %s", subject)
        logger.debug("Message: %s", message)

        try:
            if self._transport is not None:
                self._transport(to, subject, message, type)
        except Exception as e:
            logger.error("Sending %s notification to %s failed: %s", type, to, e)
            return NotificationReceipt(success=False, to=to, subject=subject, type=type, error=str(e))

        return NotificationReceipt(success=True, to=to, subject=subject, type=type, sent_at=now_local())
