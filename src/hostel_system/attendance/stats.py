"""Attendance aggregation.

Pure functions over already-fetched records. An empty window yields
``None`` ("no data"), never a zero percentage.
"""

from __future__ import annotations

from typing import Iterable, Optional

from ..core.constants import (
    EXCELLENT_ATTENDANCE_PERCENT,
    FREQUENT_LATE_RATIO,
    GRADE_BANDS,
    LOW_ATTENDANCE_PERCENT,
    LOWEST_GRADE,
)
from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceStats


def grade_band(percentage: float) -> str:
    for lower, grade in GRADE_BANDS:
        if percentage >= lower:
            return grade
    return LOWEST_GRADE


def recommendations(*, total_days: int, late_days: int, percentage: float) -> tuple[str, ...]:
    out: list[str] = []
    if percentage < LOW_ATTENDANCE_PERCENT:
        out.append("Attendance is below 75%. Try to attend more regularly.")
    if total_days and late_days / total_days > FREQUENT_LATE_RATIO:
        out.append("You are frequently late. Try to arrive on time.")
    if percentage >= EXCELLENT_ATTENDANCE_PERCENT:
        out.append("Excellent attendance. Keep it up!")
    return tuple(out)


def summarize(records: Iterable[AttendanceRecord]) -> Optional[AttendanceStats]:
    counts = {s: 0 for s in AttendanceStatus}
    total = 0
    for r in records:
        counts[r.status] += 1
        total += 1

    if total == 0:
        return None

    present = counts[AttendanceStatus.PRESENT]
    pct = round(present / total * 100, 2)
    return AttendanceStats(
        total_days=total,
        present_days=present,
        absent_days=counts[AttendanceStatus.ABSENT],
        late_days=counts[AttendanceStatus.LATE],
        excused_days=counts[AttendanceStatus.EXCUSED],
        attendance_percentage=pct,
        grade=grade_band(pct),
        recommendations=recommendations(
            total_days=total,
            late_days=counts[AttendanceStatus.LATE],
            percentage=pct,
        ),
    )
