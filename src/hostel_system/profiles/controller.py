from __future__ import annotations

from flask import Flask, request

from ..common.web import current_profile, json_body, login_required, ok, session_context
from ..core.exceptions import NotFoundError
from ..core.permissions import assignable_roles


def register(app: Flask, container) -> None:
    @app.route("/api/profile", methods=["GET"], endpoint="profile_get")
    @login_required
    def get_profile():
        ctx = session_context()
        # A missing profile is a normal state for new accounts.
        return ok(container.profile_service.get_profile(ctx.identity.user_id))

    @app.route("/api/profile", methods=["PATCH"], endpoint="profile_update")
    @login_required
    def update_profile():
        profile = container.profile_service.update_own_profile(session_context(), json_body())
        return ok(profile, "Profile updated")

    @app.route("/api/users", methods=["GET"], endpoint="users_list")
    @login_required
    def list_users():
        actor = current_profile()
        users = container.profile_service.list_users(
            actor,
            role=request.args.get("role"),
            search=request.args.get("search"),
        )
        return ok(
            {
                "users": users,
                "counts": container.profile_service.role_counts(actor),
                "assignable_roles": [r.value for r in assignable_roles(actor.role)],
            }
        )

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    @login_required
    def get_user(user_id: int):
        actor = current_profile()
        users = container.profile_service.list_users(actor)
        for u in users:
            if u.user_id == user_id:
                return ok(u)
        raise NotFoundError("User not found")

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="users_update")
    @login_required
    def update_user(user_id: int):
        profile = container.profile_service.update_user_profile(current_profile(), user_id, json_body())
        return ok(profile, "User updated")

    @app.route("/api/users/<int:user_id>/role", methods=["POST"], endpoint="users_change_role")
    @login_required
    def change_role(user_id: int):
        data = json_body()
        profile = container.role_service.change_role(
            current_profile(),
            user_id,
            data.get("role", ""),
            data.get("department"),
        )
        return ok(profile, f"{profile.name} is now {profile.role.value}")
