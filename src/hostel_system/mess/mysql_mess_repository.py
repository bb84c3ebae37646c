from __future__ import annotations

from typing import Sequence

from ..core.enums import MealType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, fetchall
from .model import MessMenu
from .repository import MessMenuRepository


def row_to_menu(r: dict) -> MessMenu:
    return MessMenu(
        menu_id=int(r["menu_id"]),
        day_of_week=r["day_of_week"],
        meal_type=MealType(r["meal_type"]),
        items=decode_json_list(r.get("items")),
        meal_time=r.get("meal_time") or "",
    )


class MySQLMessMenuRepository(MessMenuRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[MessMenu]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT menu_id, day_of_week, meal_type, items, meal_time FROM mess_menus")
            return [row_to_menu(r) for r in fetchall(cur)]
