from __future__ import annotations

from flask import Flask

from ..common.web import json_body, login_required, ok, session_context
from ..core.navigation import menu_for
from ..core.permissions import capabilities_for


def register(app: Flask, container) -> None:
    @app.route("/api/auth/signup", methods=["POST"], endpoint="auth_signup")
    def signup():
        data = json_body()
        identity = container.auth_service.sign_up(
            email=data.get("email", ""),
            password=data.get("password", ""),
            name=data.get("name", ""),
            roll_number=data.get("roll_number", ""),
            phone_number=data.get("phone_number"),
            role=data.get("role"),
        )
        return ok(identity, "Account created. Please sign in.", 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        profile = container.auth_service.sign_in(session_context(), data.get("email", ""), data.get("password", ""))
        app.logger.info("User %s signed in", session_context().identity.user_id)
        return ok({"profile": profile}, "Signed in successfully")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        container.auth_service.sign_out(session_context())
        return ok(message="Signed out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        ctx = session_context()
        role = ctx.role
        return ok(
            {
                "identity": ctx.identity,
                "profile": ctx.profile,
                "menu": menu_for(role),
                "capabilities": sorted(c.value for c in capabilities_for(role)),
            }
        )
