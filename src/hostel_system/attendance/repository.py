from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceSettings


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, on: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_check_in(self, *, user_id: int, on: date, check_in_time: datetime) -> AttendanceRecord:
        """Create or update the (user, date) row as present with a check-in time."""

        raise NotImplementedError

    def set_check_out(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        raise NotImplementedError

    def mark(
        self,
        *,
        user_id: int,
        on: date,
        status: AttendanceStatus,
        marked_at: datetime,
        notes: Optional[str],
        acting_user_id: int,
    ) -> AttendanceRecord:
        """Staff mark through the privileged procedure. Upserts on (user, date)."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records in [start, end], newest first, with the joined user summary."""

        raise NotImplementedError

    def get_settings(self) -> AttendanceSettings:
        raise NotImplementedError

    def update_settings(self, changes: dict) -> AttendanceSettings:
        raise NotImplementedError
