from __future__ import annotations

from dataclasses import dataclass, field

from ..core.enums import MealType

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MEAL_ORDER = (MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER)


@dataclass(frozen=True)
class MessMenu:
    menu_id: int
    day_of_week: str
    meal_type: MealType
    items: list[str] = field(default_factory=list)
    meal_time: str = ""
