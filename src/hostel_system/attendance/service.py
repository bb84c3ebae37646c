from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import optional_text, parse_enum, require_int
from ..core.constants import AUTO_ABSENT_NOTE, DEFAULT_BULK_MARK_WORKERS, DEFAULT_STATS_WINDOW_DAYS
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import (
    AttendanceLockedError,
    AuthorizationError,
    DuplicateCheckInError,
    DuplicateCheckOutError,
    NoCheckInError,
    ValidationError,
)
from ..core.permissions import Capability, has_capability, require_capability
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository
from .model import AttendanceRecord, AttendanceSettings, AttendanceStats, BulkMarkResult, MarkOutcome
from .repository import AttendanceRepository
from .stats import summarize

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("check_in_start", "check_in_end", "check_out_start", "check_out_end", "auto_mark_absent_after")


class AttendanceService:
    """Attendance workflow: self check-in/out, staff marking and statistics.

    Per (user, date) the record moves ``no record -> present (checked in)
    -> checked out``. Staff marks may set any status; a record a staff
    member set to absent, late or excused is closed to self check-in.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        profiles: ProfileRepository,
        *,
        bulk_workers: int = DEFAULT_BULK_MARK_WORKERS,
        stats_window_days: int = DEFAULT_STATS_WINDOW_DAYS,
    ):
        self._attendance = attendance
        self._profiles = profiles
        self._bulk_workers = max(1, int(bulk_workers))
        self._window_days = int(stats_window_days)

    # self service

    def check_in(self, user: Profile, *, now: Optional[datetime] = None) -> AttendanceRecord:
        require_capability(user.role, Capability.CHECK_IN_SELF)
        now = now or now_local()
        today = now.date()

        existing = self._attendance.get_for_user_and_date(user.user_id, today)
        if existing and existing.is_checked_in:
            raise DuplicateCheckInError("You have already checked in today")
        if existing and existing.status != AttendanceStatus.PRESENT:
            raise AttendanceLockedError(
                f"Today's attendance was already marked as {existing.status.value} by staff"
            )

        record = self._attendance.upsert_check_in(user_id=user.user_id, on=today, check_in_time=now)
        logger.info("User %s checked in at %s", user.user_id, now.isoformat(timespec="seconds"))
        return record

    def check_out(self, user: Profile, *, now: Optional[datetime] = None) -> AttendanceRecord:
        require_capability(user.role, Capability.CHECK_IN_SELF)
        now = now or now_local()
        today = now.date()

        record = self._attendance.get_for_user_and_date(user.user_id, today)
        if not record or not record.is_checked_in:
            raise NoCheckInError("Please check in first")
        if record.status != AttendanceStatus.PRESENT:
            raise AttendanceLockedError(
                f"Today's attendance was already marked as {record.status.value} by staff"
            )
        if record.is_checked_out:
            raise DuplicateCheckOutError("You have already checked out today")

        updated = self._attendance.set_check_out(attendance_id=record.attendance_id, check_out_time=now)
        logger.info("User %s checked out at %s", user.user_id, now.isoformat(timespec="seconds"))
        return updated

    # staff marking

    def bulk_mark(
        self,
        actor: Profile,
        user_ids: Iterable[int],
        status: str,
        *,
        on: Optional[date] = None,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BulkMarkResult:
        require_capability(actor.role, Capability.MARK_ATTENDANCE)
        status_enum = parse_enum(AttendanceStatus, status, "Status")

        ids = list(dict.fromkeys(require_int(u, "User id") for u in user_ids))
        if not ids:
            raise ValidationError("Please select at least one student")

        now = now or now_local()
        on = on or now.date()
        notes = optional_text(notes)

        def mark_one(user_id: int) -> MarkOutcome:
            try:
                record = self._attendance.mark(
                    user_id=user_id,
                    on=on,
                    status=status_enum,
                    marked_at=now,
                    notes=notes,
                    acting_user_id=actor.user_id,
                )
            except Exception as e:
                # Each mark stands alone; earlier successes stay committed.
                logger.warning("Marking user %s as %s on %s failed: %s", user_id, status_enum.value, on, e)
                return MarkOutcome(ok=False, error=str(e))
            return MarkOutcome(ok=True, record=record)

        workers = min(self._bulk_workers, len(ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="attendance-mark") as pool:
            outcomes = list(pool.map(mark_one, ids))

        result = BulkMarkResult(date=on, status=status_enum, outcomes=list(zip(ids, outcomes)))
        logger.info(
            "User %s marked %d user(s) %s on %s: %d ok, %d failed",
            actor.user_id,
            len(ids),
            status_enum.value,
            on,
            result.succeeded,
            result.failed,
        )
        return result

    def auto_mark_absent(
        self,
        actor: Profile,
        *,
        on: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> BulkMarkResult:
        require_capability(actor.role, Capability.MARK_ATTENDANCE)
        now = now or now_local()
        on = on or now.date()

        if on > now.date():
            raise ValidationError("Cannot mark absences for a future date")
        if on == now.date():
            cutoff = self._attendance.get_settings().auto_mark_absent_after
            if now.time() < cutoff:
                raise ValidationError(f"Absences can only be marked after {cutoff.strftime('%H:%M')}")

        marked = {r.user_id for r in self._attendance.list_range(start=on, end=on)}
        missing = [p.user_id for p in self._profiles.list_all(role=Role.STUDENT) if p.user_id not in marked]
        if not missing:
            return BulkMarkResult(date=on, status=AttendanceStatus.ABSENT)
        return self.bulk_mark(actor, missing, AttendanceStatus.ABSENT.value, on=on, notes=AUTO_ABSENT_NOTE, now=now)

    # listings and statistics

    def _scope_user(self, actor: Profile, user_id: Optional[int]) -> Optional[int]:
        if has_capability(actor.role, Capability.VIEW_ALL_ATTENDANCE):
            return int(user_id) if user_id is not None else None
        if user_id is not None and int(user_id) != actor.user_id:
            raise AuthorizationError("You can only view your own attendance")
        return actor.user_id

    def _window(self, start: Optional[date], end: Optional[date], today: date) -> tuple[date, date]:
        end = end or today
        start = start or end - timedelta(days=self._window_days)
        if start > end:
            raise ValidationError("Start date must be before end date")
        return start, end

    def today(
        self,
        actor: Profile,
        *,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        today = (now or now_local()).date()
        scoped = self._scope_user(actor, user_id)
        return self._attendance.list_range(start=today, end=today, user_id=scoped)

    def today_record(self, user: Profile, *, now: Optional[datetime] = None) -> Optional[AttendanceRecord]:
        today = (now or now_local()).date()
        return self._attendance.get_for_user_and_date(user.user_id, today)

    def history(
        self,
        actor: Profile,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        start, end = self._window(start, end, (now or now_local()).date())
        scoped = self._scope_user(actor, user_id)
        return self._attendance.list_range(start=start, end=end, user_id=scoped)

    def compute_statistics(
        self,
        actor: Profile,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
        user_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Optional[AttendanceStats]:
        start, end = self._window(start, end, (now or now_local()).date())
        scoped = self._scope_user(actor, user_id)
        return summarize(self._attendance.list_range(start=start, end=end, user_id=scoped))

    # settings

    def get_settings(self) -> AttendanceSettings:
        return self._attendance.get_settings()

    def update_settings(self, actor: Profile, changes: dict) -> AttendanceSettings:
        require_capability(actor.role, Capability.MANAGE_ATTENDANCE_SETTINGS)

        unknown = set(changes) - set(_TIME_FIELDS) - {"late_threshold_minutes"}
        if unknown:
            raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")

        cleaned: dict = {}
        for key in _TIME_FIELDS:
            if key in changes:
                value = changes[key]
                cleaned[key] = value if isinstance(value, time) else parse_hhmm(value, key.replace("_", " "))

        if "late_threshold_minutes" in changes:
            try:
                minutes = int(changes["late_threshold_minutes"])
            except (TypeError, ValueError):
                raise ValidationError("Late threshold must be a whole number of minutes")
            if minutes < 0:
                raise ValidationError("Late threshold cannot be negative")
            cleaned["late_threshold_minutes"] = minutes

        current = self._attendance.get_settings()
        start = cleaned.get("check_in_start", current.check_in_start)
        end = cleaned.get("check_in_end", current.check_in_end)
        if start >= end:
            raise ValidationError("Check-in start must be before check-in end")

        updated = self._attendance.update_settings(cleaned)
        logger.info("Attendance settings updated by user %s: %s", actor.user_id, sorted(cleaned))
        return updated
