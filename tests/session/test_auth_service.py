from __future__ import annotations

import pytest

from hostel_system.core.enums import AuthEvent, Role
from hostel_system.core.exceptions import AuthenticationError, ValidationError
from hostel_system.session.service import AuthService


@pytest.fixture
def auth(accounts_repo, profiles_repo):
    return AuthService(accounts_repo, profiles_repo)


def test_sign_in_with_valid_credentials(auth, student):
    ctx = auth.new_context()
    events = []
    ctx.subscribe(lambda event, c: events.append(event))

    profile = auth.sign_in(ctx, "Student@Hostel.local ", "student123")

    assert profile == student
    assert ctx.identity.user_id == student.user_id
    assert events == [AuthEvent.SIGNED_IN]


@pytest.mark.parametrize("email, password", [("student@hostel.local", "nope"), ("ghost@hostel.local", "x")])
def test_sign_in_rejects_bad_credentials(auth, email, password):
    ctx = auth.new_context()
    with pytest.raises(AuthenticationError):
        auth.sign_in(ctx, email, password)
    assert not ctx.is_authenticated


def test_sign_up_then_first_sign_in_provisions_student_profile(auth, profiles_repo):
    identity = auth.sign_up(
        email="new@hostel.local",
        password="secret1",
        name="Nisha Rao",
        roll_number="STU-100",
        phone_number="12345",
        role="admin",
    )
    assert profiles_repo.get_by_id(identity.user_id) is None

    ctx = auth.new_context()
    profile = auth.sign_in(ctx, "new@hostel.local", "secret1")

    assert profile.role == Role.STUDENT
    assert profile.name == "Nisha Rao"
    assert profile.phone_number == "12345"


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(email="bad-email", password="secret1", name="A", roll_number="R1"),
        dict(email="a@hostel.local", password="123", name="A", roll_number="R1"),
        dict(email="a@hostel.local", password="secret1", name=" ", roll_number="R1"),
        dict(email="a@hostel.local", password="secret1", name="A", roll_number=""),
        dict(email="student@hostel.local", password="secret1", name="A", roll_number="R1"),
    ],
)
def test_sign_up_validation(auth, kwargs):
    with pytest.raises(ValidationError):
        auth.sign_up(**kwargs)


def test_sign_out_and_restore(auth, student):
    ctx = auth.new_context()
    auth.sign_in(ctx, "student@hostel.local", "student123")
    auth.sign_out(ctx)
    assert ctx.identity is None

    restored = auth.new_context()
    events = []
    restored.subscribe(lambda event, c: events.append(event))
    assert auth.restore(restored, student.user_id) == student
    assert events == [AuthEvent.INITIAL_SESSION]


def test_restore_unknown_account_signs_out(auth):
    ctx = auth.new_context()
    events = []
    ctx.subscribe(lambda event, c: events.append(event))

    assert auth.restore(ctx, 9999) is None
    assert events == [AuthEvent.SIGNED_OUT]
