from __future__ import annotations

from datetime import datetime

from flask import Flask

from ..common.web import current_profile, json_body, login_required, ok
from ..core.exceptions import ValidationError


def _parse_expiry(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        raise ValidationError("expires_at must be an ISO date-time")


def register(app: Flask, container) -> None:
    service = container.notice_service

    @app.route("/api/notices", methods=["GET"], endpoint="notices_list")
    @login_required
    def list_notices():
        return ok(service.active_notices())

    @app.route("/api/notices", methods=["POST"], endpoint="notices_publish")
    @login_required
    def publish():
        data = json_body()
        notice = service.publish(
            current_profile(),
            title=data.get("title", ""),
            content=data.get("content", ""),
            priority=data.get("priority") or "medium",
            expires_at=_parse_expiry(data.get("expires_at")),
        )
        return ok(notice, "Notice published", 201)
