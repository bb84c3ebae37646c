from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from hostel_system.attendance.model import AttendanceRecord, AttendanceSettings, AttendeeSummary
from hostel_system.complaints.model import Complaint
from hostel_system.core.enums import AttendanceStatus, BookingStatus, ComplaintStatus, MealType, Role
from hostel_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from hostel_system.mess.model import MessMenu
from hostel_system.notices.model import PRIORITY_RANK, Notice
from hostel_system.profiles.model import ADMIN_EDITABLE_FIELDS, Profile
from hostel_system.rooms.model import Room, RoomBooking
from hostel_system.session.model import Account

FIXED_NOW = datetime(2026, 3, 10, 9, 30, 0)


class InMemoryProfiles:
    """Profiles plus the server-side role checks of the role procedures."""

    def __init__(self, profiles=()):
        self.by_id: dict[int, Profile] = {p.user_id: p for p in profiles}
        self.procedure_calls: list[str] = []

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        return self.by_id.get(int(user_id))

    def create_profile(self, *, user_id, name, roll_number, phone_number=None, role=Role.STUDENT) -> Profile:
        if user_id not in self.by_id:
            self.by_id[user_id] = Profile(
                user_id=user_id, name=name, roll_number=roll_number, role=role, phone_number=phone_number
            )
        return self.by_id[user_id]

    def update_fields(self, user_id, changes):
        p = self.by_id.get(int(user_id))
        if p is None:
            return None
        p = replace(p, **{k: v for k, v in changes.items() if k in ADMIN_EDITABLE_FIELDS})
        self.by_id[p.user_id] = p
        return p

    def list_all(self, *, role=None):
        return [p for p in self.by_id.values() if role is None or p.role == role]

    def _actor_role(self, acting_user_id):
        actor = self.by_id.get(int(acting_user_id))
        return actor.role if actor else None

    def _target(self, target_user_id) -> Profile:
        target = self.by_id.get(int(target_user_id))
        if target is None:
            raise NotFoundError("User not found")
        return target

    def promote_to_admin(self, *, target_user_id, acting_user_id):
        self.procedure_calls.append("promote_to_admin")
        if self._actor_role(acting_user_id) != Role.ADMIN:
            raise AuthorizationError("Only admins can promote users to admin")
        t = self._target(target_user_id)
        self.by_id[t.user_id] = replace(t, role=Role.ADMIN)

    def promote_to_warden(self, *, target_user_id, department, acting_user_id):
        self.procedure_calls.append("promote_to_warden")
        if self._actor_role(acting_user_id) != Role.ADMIN:
            raise AuthorizationError("Only admins can promote users to warden")
        t = self._target(target_user_id)
        self.by_id[t.user_id] = replace(t, role=Role.WARDEN, department=department)

    def demote_to_student(self, *, target_user_id, acting_user_id):
        self.procedure_calls.append("demote_to_student")
        t = self._target(target_user_id)
        actor_role = self._actor_role(acting_user_id)
        if actor_role in (None, Role.STUDENT) or (actor_role == Role.WARDEN and t.role != Role.STUDENT):
            raise AuthorizationError("You cannot change this user's role")
        self.by_id[t.user_id] = replace(t, role=Role.STUDENT, department=None)


class InMemoryAccounts:
    def __init__(self):
        self.by_id: dict[int, Account] = {}
        self._ids = itertools.count(100)

    def add(self, account: Account) -> Account:
        self.by_id[account.user_id] = account
        return account

    def get_by_id(self, user_id):
        return self.by_id.get(int(user_id))

    def get_by_email(self, email):
        for a in self.by_id.values():
            if a.email == email:
                return a
        return None

    def create_account(self, *, email, password_hash, name, roll_number, phone_number=None) -> int:
        user_id = next(self._ids)
        self.by_id[user_id] = Account(
            user_id=user_id,
            email=email,
            password_hash=password_hash,
            name=name,
            roll_number=roll_number,
            phone_number=phone_number,
        )
        return user_id


class InMemoryAttendance:
    """One row per (user, date), like the unique key of attendance_records."""

    def __init__(self, profiles: Optional[InMemoryProfiles] = None):
        self.rows: dict[tuple[int, date], AttendanceRecord] = {}
        self.profiles = profiles
        self.fail_mark_for: set[int] = set()
        self.mark_calls: list[int] = []
        self.settings = AttendanceSettings(
            check_in_start=time(6, 0),
            check_in_end=time(10, 0),
            check_out_start=time(17, 0),
            check_out_end=time(22, 0),
            late_threshold_minutes=15,
            auto_mark_absent_after=time(23, 0),
        )
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def put(self, user_id, on, status, **kwargs) -> AttendanceRecord:
        existing = self.rows.get((user_id, on))
        rec = AttendanceRecord(
            attendance_id=existing.attendance_id if existing else next(self._ids),
            user_id=user_id,
            date=on,
            status=AttendanceStatus(status),
            **kwargs,
        )
        self.rows[(user_id, on)] = rec
        return rec

    def get_for_user_and_date(self, user_id, on):
        return self.rows.get((int(user_id), on))

    def upsert_check_in(self, *, user_id, on, check_in_time):
        with self._lock:
            existing = self.rows.get((user_id, on))
            if existing:
                rec = replace(existing, status=AttendanceStatus.PRESENT, check_in_time=check_in_time, marked_by=user_id)
                self.rows[(user_id, on)] = rec
                return rec
            return self.put(user_id, on, AttendanceStatus.PRESENT, check_in_time=check_in_time, marked_by=user_id)

    def set_check_out(self, *, attendance_id, check_out_time):
        with self._lock:
            for key, rec in self.rows.items():
                if rec.attendance_id == attendance_id:
                    self.rows[key] = replace(rec, check_out_time=check_out_time)
                    return self.rows[key]
        raise NotFoundError("Attendance record not found")

    def mark(self, *, user_id, on, status, marked_at, notes, acting_user_id):
        with self._lock:
            self.mark_calls.append(user_id)
            if user_id in self.fail_mark_for:
                raise NotFoundError("Student profile not found")
            existing = self.rows.get((user_id, on))
            if existing:
                rec = replace(existing, status=AttendanceStatus(status), notes=notes, marked_by=acting_user_id)
                self.rows[(user_id, on)] = rec
                return rec
            return self.put(user_id, on, status, notes=notes, marked_by=acting_user_id)

    def list_range(self, *, start, end, user_id=None):
        out = []
        for (uid, d), rec in self.rows.items():
            if start <= d <= end and (user_id is None or uid == user_id):
                p = self.profiles.get_by_id(uid) if self.profiles else None
                if p is not None:
                    rec = replace(
                        rec,
                        user=AttendeeSummary(
                            name=p.name,
                            roll_number=p.roll_number,
                            room_number=p.room_number,
                            hostel_block=p.hostel_block,
                        ),
                    )
                out.append(rec)
        out.sort(key=lambda r: (r.date, r.attendance_id), reverse=True)
        return out

    def get_settings(self):
        return self.settings

    def update_settings(self, changes):
        self.settings = replace(self.settings, **changes)
        return self.settings


class InMemoryRooms:
    def __init__(self, rooms=()):
        self.rooms: dict[int, Room] = {r.room_id: r for r in rooms}
        self.bookings: dict[int, RoomBooking] = {}
        self._ids = itertools.count(1)

    def list_rooms(self, *, block=None):
        rooms = [r for r in self.rooms.values() if block is None or r.block == block]
        return sorted(rooms, key=lambda r: (r.block, r.number))

    def get_room(self, room_id):
        return self.rooms.get(int(room_id))

    def _with_room(self, b: RoomBooking) -> RoomBooking:
        return replace(b, room=self.rooms.get(b.room_id))

    def list_bookings(self, *, user_id=None):
        items = [b for b in self.bookings.values() if user_id is None or b.user_id == user_id]
        items.sort(key=lambda b: b.booking_id, reverse=True)
        return [self._with_room(b) for b in items]

    def get_booking(self, booking_id):
        b = self.bookings.get(int(booking_id))
        return self._with_room(b) if b else None

    def create_booking(self, *, user_id, room_id, booking_date, start_date, end_date=None):
        booking_id = next(self._ids)
        self.bookings[booking_id] = RoomBooking(
            booking_id=booking_id,
            user_id=user_id,
            room_id=room_id,
            status=BookingStatus.PENDING,
            booking_date=booking_date,
            start_date=start_date,
            end_date=end_date,
        )
        return self.get_booking(booking_id)

    def approve_booking(self, booking_id):
        b = self.bookings[int(booking_id)]
        room = self.rooms[b.room_id]
        if room.occupied >= room.capacity:
            raise ValidationError("Room is already full")
        occupied = room.occupied + 1
        self.rooms[room.room_id] = replace(room, occupied=occupied, available=occupied < room.capacity)
        self.bookings[b.booking_id] = replace(b, status=BookingStatus.APPROVED)
        return self.get_booking(booking_id)

    def close_booking(self, booking_id, status):
        b = self.bookings[int(booking_id)]
        if b.status == BookingStatus.APPROVED:
            room = self.rooms[b.room_id]
            self.rooms[room.room_id] = replace(room, occupied=max(room.occupied - 1, 0), available=True)
        self.bookings[b.booking_id] = replace(b, status=BookingStatus(status))
        return self.get_booking(booking_id)


class InMemoryComplaints:
    def __init__(self):
        self.rows: dict[int, Complaint] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(0)

    def create(self, *, user_id, title, description, category, priority):
        complaint_id = next(self._ids)
        self.rows[complaint_id] = Complaint(
            complaint_id=complaint_id,
            user_id=user_id,
            title=title,
            description=description,
            category=category,
            priority=priority,
            created_at=datetime(2026, 3, 1, 8, 0, next(self._clock)),
        )
        return self.rows[complaint_id]

    def get_by_id(self, complaint_id):
        return self.rows.get(int(complaint_id))

    def list(self, *, user_id=None):
        items = [c for c in self.rows.values() if user_id is None or c.user_id == user_id]
        return sorted(items, key=lambda c: (c.created_at, c.complaint_id), reverse=True)

    def update_status(self, complaint_id, *, status, resolved_at):
        c = self.rows.get(int(complaint_id))
        if c is None:
            return None
        self.rows[c.complaint_id] = replace(c, status=ComplaintStatus(status), resolved_at=resolved_at)
        return self.rows[c.complaint_id]


class InMemoryMenus:
    def __init__(self, menus=()):
        self.menus = list(menus)

    def list_all(self):
        return list(self.menus)


class InMemoryNotices:
    def __init__(self, notices=()):
        self.rows: list[Notice] = list(notices)
        self._ids = itertools.count(len(self.rows) + 1)

    def list_active(self, *, now, limit):
        active = [n for n in self.rows if n.is_active(now)]
        active.sort(key=lambda n: n.created_at or datetime.min, reverse=True)
        active.sort(key=lambda n: PRIORITY_RANK[n.priority])
        return active[:limit]

    def create(self, *, title, content, priority, expires_at):
        notice = Notice(
            notice_id=next(self._ids),
            title=title,
            content=content,
            priority=priority,
            expires_at=expires_at,
            created_at=FIXED_NOW,
        )
        self.rows.append(notice)
        return notice


class RecordingNotifications:
    def __init__(self):
        self.sent: list[dict] = []

    def send(self, *, to, subject, message, type):
        self.sent.append({"to": to, "subject": subject, "message": message, "type": type})


ADMIN = Profile(user_id=1, name="Asha Admin", roll_number="ADM-001", role=Role.ADMIN)
WARDEN = Profile(user_id=2, name="Vikram Warden", roll_number="WRD-001", role=Role.WARDEN, department="Block A")
STUDENTS = tuple(
    Profile(
        user_id=uid,
        name=name,
        roll_number=f"STU-{uid:03d}",
        role=Role.STUDENT,
        hostel_block="A",
        room_number=str(100 + uid),
    )
    for uid, name in ((3, "Ravi Kumar"), (4, "Meera Nair"), (5, "Arjun Das"), (6, "Priya Shah"), (7, "Kabir Singh"))
)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def admin() -> Profile:
    return ADMIN


@pytest.fixture
def warden() -> Profile:
    return WARDEN


@pytest.fixture
def students() -> tuple[Profile, ...]:
    return STUDENTS


@pytest.fixture
def student() -> Profile:
    return STUDENTS[0]


@pytest.fixture
def profiles_repo() -> InMemoryProfiles:
    return InMemoryProfiles((ADMIN, WARDEN) + STUDENTS)


@pytest.fixture
def attendance_repo(profiles_repo) -> InMemoryAttendance:
    return InMemoryAttendance(profiles_repo)


@pytest.fixture
def rooms_repo() -> InMemoryRooms:
    return InMemoryRooms(
        (
            Room(room_id=1, number="101", block="A", capacity=2, occupied=0, amenities=["Wi-Fi"], rent=4500.0),
            Room(room_id=2, number="102", block="A", capacity=1, occupied=1, rent=4000.0, available=False),
            Room(room_id=3, number="201", block="B", capacity=1, occupied=0, rent=6500.0),
        )
    )


@pytest.fixture
def complaints_repo() -> InMemoryComplaints:
    return InMemoryComplaints()


@pytest.fixture
def menus_repo() -> InMemoryMenus:
    return InMemoryMenus(
        (
            MessMenu(menu_id=1, day_of_week="Tuesday", meal_type=MealType.DINNER, items=["Roti"], meal_time="7:30 PM"),
            MessMenu(menu_id=2, day_of_week="Monday", meal_type=MealType.LUNCH, items=["Rice", "Dal"], meal_time="12:30 PM"),
            MessMenu(menu_id=3, day_of_week="Monday", meal_type=MealType.BREAKFAST, items=["Poha"], meal_time="7:30 AM"),
            MessMenu(menu_id=4, day_of_week="Sunday", meal_type=MealType.BREAKFAST, items=["Dosa"], meal_time="8:00 AM"),
        )
    )


@pytest.fixture
def notices_repo() -> InMemoryNotices:
    return InMemoryNotices()


@pytest.fixture
def notifications() -> RecordingNotifications:
    return RecordingNotifications()


@pytest.fixture
def accounts_repo() -> InMemoryAccounts:
    repo = InMemoryAccounts()
    for p, email, password in (
        (ADMIN, "admin@hostel.local", "admin123"),
        (WARDEN, "warden@hostel.local", "warden123"),
        (STUDENTS[0], "student@hostel.local", "student123"),
    ):
        repo.add(
            Account(
                user_id=p.user_id,
                email=email,
                password_hash=generate_password_hash(password),
                name=p.name,
                roll_number=p.roll_number,
            )
        )
    return repo
