"""Shared Flask plumbing for the JSON controllers.

- a per-request SessionContext restored from the signed session cookie,
  with a listener that keeps the cookie in step and is unsubscribed at
  teardown
- ``login_required`` and ``current_profile`` for views
- domain exception -> JSON response mapping
- ``to_json`` for dataclasses, enums and dates
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, g, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..common.datetime_utils import parse_optional_date
from ..core.enums import AuthEvent
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ..profiles.model import Profile
from ..session.context import SessionContext

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
)


def to_json(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_json(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, dict):
        return {str(k): to_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [to_json(v) for v in obj]
    return obj


def ok(data: Any = None, message: str = "OK", status: int = 200):
    payload = {"success": True, "message": message}
    if data is not None:
        payload["data"] = to_json(data)
    return jsonify(payload), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def query_date(name: str) -> Optional[date]:
    return parse_optional_date(request.args.get(name))


def session_context() -> SessionContext:
    return g.session_ctx


def current_profile() -> Profile:
    return session_context().require_profile()


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        session_context().require_identity()
        return view(*args, **kwargs)

    return wrapper


def _sync_cookie(event: AuthEvent, ctx: SessionContext) -> None:
    if ctx.identity is None:
        session.clear()
        return
    if event in (AuthEvent.SIGNED_IN, AuthEvent.INITIAL_SESSION):
        session.permanent = True
        session["user_id"] = ctx.identity.user_id


def init_web(app: Flask, container) -> None:
    """Install session handling and the JSON error handlers on ``app``."""

    @app.before_request
    def _open_session_context():
        ctx = container.auth_service.new_context()
        g.session_ctx = ctx
        g.session_sub = ctx.subscribe(_sync_cookie)
        user_id = session.get("user_id")
        if user_id is not None:
            container.auth_service.restore(ctx, user_id)

    @app.teardown_request
    def _close_session_context(exc=None):
        sub = g.pop("session_sub", None)
        if sub is not None:
            sub.unsubscribe()
        g.pop("session_ctx", None)

    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        for cls, status in _STATUS_BY_ERROR:
            if isinstance(e, cls):
                return fail(str(e), status)
        return fail(str(e), 400)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("Something went wrong. Please try again.", 500)
