from __future__ import annotations

import pytest

from hostel_system.core.enums import MealType
from hostel_system.core.exceptions import ValidationError
from hostel_system.mess.service import MessMenuService


@pytest.fixture
def svc(menus_repo):
    return MessMenuService(menus_repo)


def test_menus_ordered_by_weekday_then_meal(svc):
    assert [(m.day_of_week, m.meal_type) for m in svc.list_menus()] == [
        ("Monday", MealType.BREAKFAST),
        ("Monday", MealType.LUNCH),
        ("Tuesday", MealType.DINNER),
        ("Sunday", MealType.BREAKFAST),
    ]


def test_menu_for_day_is_case_insensitive(svc):
    assert [m.menu_id for m in svc.menu_for_day("monday")] == [3, 2]
    assert svc.menu_for_day("Wednesday") == []


def test_menu_for_day_and_meal(svc):
    assert svc.menu_for_day_and_meal("Monday", "Lunch").items == ["Rice", "Dal"]
    assert svc.menu_for_day_and_meal("Sunday", "dinner") is None


def test_invalid_day_or_meal(svc):
    with pytest.raises(ValidationError):
        svc.menu_for_day("Funday")
    with pytest.raises(ValidationError):
        svc.menu_for_day_and_meal("Monday", "brunch")
