from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import parse_enum
from ..core.enums import MealType
from ..core.exceptions import ValidationError
from .model import MEAL_ORDER, WEEKDAYS, MessMenu
from .repository import MessMenuRepository


def _normalize_day(day: str) -> str:
    d = (day or "").strip().capitalize()
    if d not in WEEKDAYS:
        raise ValidationError(f"Day must be one of: {', '.join(WEEKDAYS)}")
    return d


def _sort_key(m: MessMenu) -> tuple[int, int]:
    day = WEEKDAYS.index(m.day_of_week) if m.day_of_week in WEEKDAYS else len(WEEKDAYS)
    return day, MEAL_ORDER.index(m.meal_type)


class MessMenuService:
    """Read-only weekly menu, ordered Monday first then breakfast, lunch, dinner."""

    def __init__(self, menus: MessMenuRepository):
        self._menus = menus

    def list_menus(self) -> Sequence[MessMenu]:
        return sorted(self._menus.list_all(), key=_sort_key)

    def menu_for_day(self, day: str) -> Sequence[MessMenu]:
        d = _normalize_day(day)
        return [m for m in self.list_menus() if m.day_of_week == d]

    def menu_for_day_and_meal(self, day: str, meal: str) -> Optional[MessMenu]:
        meal_type = parse_enum(MealType, (meal or "").strip().lower(), "Meal")
        for m in self.menu_for_day(day):
            if m.meal_type == meal_type:
                return m
        return None
