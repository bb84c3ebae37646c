from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date (expected YYYY-MM-DD): {value!r}")


def parse_optional_date(value: Optional[str]) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value).strip())


def parse_hhmm(value: str, field_name: str) -> time:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a time (HH:MM)")
    v = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"{field_name} must be a time (HH:MM)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
