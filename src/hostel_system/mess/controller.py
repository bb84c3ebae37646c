from __future__ import annotations

from flask import Flask

from ..common.web import login_required, ok
from ..core.exceptions import NotFoundError


def register(app: Flask, container) -> None:
    service = container.mess_service

    @app.route("/api/mess-menu", methods=["GET"], endpoint="mess_menu_list")
    @login_required
    def list_menus():
        return ok(service.list_menus())

    @app.route("/api/mess-menu/<day>", methods=["GET"], endpoint="mess_menu_day")
    @login_required
    def menu_for_day(day: str):
        return ok(service.menu_for_day(day))

    @app.route("/api/mess-menu/<day>/<meal>", methods=["GET"], endpoint="mess_menu_meal")
    @login_required
    def menu_for_meal(day: str, meal: str):
        menu = service.menu_for_day_and_meal(day, meal)
        if menu is None:
            raise NotFoundError("No menu for this meal")
        return ok(menu)
