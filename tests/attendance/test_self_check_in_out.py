from __future__ import annotations

from datetime import timedelta

import pytest

from hostel_system.attendance.service import AttendanceService
from hostel_system.core.enums import AttendanceStatus
from hostel_system.core.exceptions import (
    AttendanceLockedError,
    AuthorizationError,
    DuplicateCheckInError,
    DuplicateCheckOutError,
    NoCheckInError,
)


@pytest.fixture
def svc(attendance_repo, profiles_repo):
    return AttendanceService(attendance_repo, profiles_repo)


def test_check_in_creates_present_record_with_timestamp(svc, attendance_repo, student, fixed_now):
    rec = svc.check_in(student, now=fixed_now)

    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in_time == fixed_now
    assert rec.check_out_time is None
    assert rec.marked_by == student.user_id
    assert attendance_repo.get_for_user_and_date(student.user_id, fixed_now.date()) == rec


def test_second_check_in_same_day_is_rejected(svc, student, fixed_now):
    svc.check_in(student, now=fixed_now)

    with pytest.raises(DuplicateCheckInError):
        svc.check_in(student, now=fixed_now + timedelta(hours=1))


def test_one_record_per_user_and_day(svc, attendance_repo, warden, student, fixed_now):
    svc.bulk_mark(warden, [student.user_id], "present", now=fixed_now)
    svc.check_in(student, now=fixed_now)
    svc.check_out(student, now=fixed_now + timedelta(hours=8))
    svc.bulk_mark(warden, [student.user_id], "present", notes="seen at dinner", now=fixed_now)

    records = [r for (uid, _), r in attendance_repo.rows.items() if uid == student.user_id]
    assert len(records) == 1
    assert records[0].check_in_time == fixed_now


def test_check_in_next_day_starts_a_new_record(svc, attendance_repo, student, fixed_now):
    svc.check_in(student, now=fixed_now)
    svc.check_in(student, now=fixed_now + timedelta(days=1))

    assert len(attendance_repo.rows) == 2


def test_check_out_without_check_in_fails(svc, student, fixed_now):
    with pytest.raises(NoCheckInError):
        svc.check_out(student, now=fixed_now)


def test_check_out_sets_timestamp_and_is_terminal(svc, student, fixed_now):
    svc.check_in(student, now=fixed_now)
    later = fixed_now + timedelta(hours=9)

    rec = svc.check_out(student, now=later)
    assert rec.check_out_time == later
    assert rec.status == AttendanceStatus.PRESENT

    with pytest.raises(DuplicateCheckOutError):
        svc.check_out(student, now=later + timedelta(minutes=5))


def test_check_out_on_staff_marked_record_without_check_in_fails(svc, warden, student, fixed_now):
    svc.bulk_mark(warden, [student.user_id], "present", now=fixed_now)

    with pytest.raises(NoCheckInError):
        svc.check_out(student, now=fixed_now)


@pytest.mark.parametrize("status", ["absent", "late", "excused"])
def test_staff_mark_locks_self_check_in(svc, attendance_repo, warden, student, fixed_now, status):
    svc.bulk_mark(warden, [student.user_id], status, now=fixed_now)

    with pytest.raises(AttendanceLockedError):
        svc.check_in(student, now=fixed_now)

    rec = attendance_repo.get_for_user_and_date(student.user_id, fixed_now.date())
    assert rec.status == AttendanceStatus(status)
    assert rec.check_in_time is None


@pytest.mark.parametrize("status", ["absent", "late", "excused"])
def test_staff_mark_after_check_in_locks_self_check_out(svc, attendance_repo, warden, student, fixed_now, status):
    svc.check_in(student, now=fixed_now)
    svc.bulk_mark(warden, [student.user_id], status, now=fixed_now + timedelta(hours=1))

    with pytest.raises(AttendanceLockedError):
        svc.check_out(student, now=fixed_now + timedelta(hours=9))

    rec = attendance_repo.get_for_user_and_date(student.user_id, fixed_now.date())
    assert rec.status == AttendanceStatus(status)
    assert rec.check_in_time == fixed_now
    assert rec.check_out_time is None


def test_staff_marked_present_can_still_be_checked_into(svc, warden, student, fixed_now):
    svc.bulk_mark(warden, [student.user_id], "present", now=fixed_now)

    rec = svc.check_in(student, now=fixed_now)
    assert rec.check_in_time == fixed_now


def test_staff_cannot_self_check_in(svc, warden, fixed_now):
    with pytest.raises(AuthorizationError):
        svc.check_in(warden, now=fixed_now)


def test_today_record_for_user(svc, student, fixed_now):
    assert svc.today_record(student, now=fixed_now) is None
    svc.check_in(student, now=fixed_now)
    assert svc.today_record(student, now=fixed_now).check_in_time == fixed_now
