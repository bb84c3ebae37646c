from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendeeSummary:
    """Joined profile columns shown next to a record on staff screens."""

    name: str
    roll_number: str
    room_number: Optional[str] = None
    hostel_block: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one day of attendance for one user."""

    attendance_id: int
    user_id: int
    date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None
    marked_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[AttendeeSummary] = None

    @property
    def is_checked_in(self) -> bool:
        return self.check_in_time is not None

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None


@dataclass(frozen=True)
class AttendanceSettings:
    check_in_start: time
    check_in_end: time
    check_out_start: time
    check_out_end: time
    late_threshold_minutes: int
    auto_mark_absent_after: time


@dataclass(frozen=True)
class AttendanceStats:
    """Read-model: aggregate over a date window. Never built for an empty window."""

    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    attendance_percentage: float
    grade: str
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class MarkOutcome:
    ok: bool
    record: Optional[AttendanceRecord] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class BulkMarkResult:
    date: date
    status: AttendanceStatus
    outcomes: list[tuple[int, MarkOutcome]] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for _, o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return sum(1 for _, o in self.outcomes if not o.ok)

    @property
    def failed_user_ids(self) -> list[int]:
        return [uid for uid, o in self.outcomes if not o.ok]
