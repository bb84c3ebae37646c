from __future__ import annotations

import pytest

from hostel_system.core.enums import AuthEvent, Role
from hostel_system.core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from hostel_system.profiles.service import ProfileService
from hostel_system.session.context import SessionContext
from hostel_system.session.model import Identity


@pytest.fixture
def svc(profiles_repo):
    return ProfileService(profiles_repo)


def test_missing_profile_is_none(svc):
    assert svc.get_profile(404) is None


def test_update_own_profile_refreshes_session(svc, profiles_repo, student):
    ctx = SessionContext(profiles_repo)
    ctx.apply(AuthEvent.SIGNED_IN, Identity(user_id=student.user_id, email="s@hostel.local"))
    events = []
    sub = ctx.subscribe(lambda event, c: events.append(event))

    updated = svc.update_own_profile(ctx, {"phone_number": " 98765 ", "room_number": "204"})

    assert updated.phone_number == "98765"
    assert ctx.profile == updated
    assert events == [AuthEvent.PROFILE_UPDATED]
    sub.unsubscribe()


def test_update_own_profile_cannot_touch_role(svc, profiles_repo, student):
    ctx = SessionContext(profiles_repo)
    ctx.apply(AuthEvent.SIGNED_IN, Identity(user_id=student.user_id, email="s@hostel.local"))

    with pytest.raises(ValidationError):
        svc.update_own_profile(ctx, {"role": "admin"})
    with pytest.raises(ValidationError):
        svc.update_own_profile(ctx, {"name": "  "})
    assert profiles_repo.get_by_id(student.user_id).role == Role.STUDENT


def test_update_own_profile_requires_sign_in(svc, profiles_repo):
    with pytest.raises(AuthenticationError):
        svc.update_own_profile(SessionContext(profiles_repo), {"name": "X"})


def test_admin_lists_everyone(svc, admin, students):
    assert len(svc.list_users(admin)) == 2 + len(students)


def test_warden_sees_only_students(svc, warden, students):
    users = svc.list_users(warden)

    assert {u.user_id for u in users} == {s.user_id for s in students}
    assert svc.list_users(warden, role="admin") == []


def test_student_cannot_list_users(svc, student):
    with pytest.raises(AuthorizationError):
        svc.list_users(student)


def test_search_matches_name_or_roll_number(svc, admin):
    assert [u.name for u in svc.list_users(admin, search="meera")] == ["Meera Nair"]
    assert [u.roll_number for u in svc.list_users(admin, search="stu-005")] == ["STU-005"]
    assert [u.user_id for u in svc.list_users(admin, role="warden")] == [2]


def test_role_counts(svc, admin, student):
    assert svc.role_counts(admin) == {"student": 5, "warden": 1, "admin": 1}
    with pytest.raises(AuthorizationError):
        svc.role_counts(student)


def test_update_user_profile_admin_only(svc, admin, warden, student):
    updated = svc.update_user_profile(admin, student.user_id, {"roll_number": "STU-999", "hostel_block": "B"})
    assert updated.roll_number == "STU-999"
    assert updated.hostel_block == "B"

    with pytest.raises(AuthorizationError):
        svc.update_user_profile(warden, student.user_id, {"hostel_block": "C"})
    with pytest.raises(ValidationError):
        svc.update_user_profile(admin, student.user_id, {"role": "admin"})
