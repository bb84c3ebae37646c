from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import call_procedure, db_cursor, fetchall, fetchone
from .model import ADMIN_EDITABLE_FIELDS, Profile
from .repository import ProfileRepository

_COLUMNS = "user_id, name, roll_number, phone_number, hostel_block, room_number, avatar_url, role, department"


def row_to_profile(r: dict) -> Profile:
    return Profile(
        user_id=int(r["user_id"]),
        name=r["name"],
        roll_number=r["roll_number"],
        role=Role(r["role"]),
        phone_number=r.get("phone_number"),
        hostel_block=r.get("hostel_block"),
        room_number=r.get("room_number"),
        avatar_url=r.get("avatar_url"),
        department=r.get("department"),
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return row_to_profile(row) if row else None

    def create_profile(
        self,
        *,
        user_id: int,
        name: str,
        roll_number: str,
        phone_number: Optional[str] = None,
        role: Role = Role.STUDENT,
    ) -> Profile:
        with db_cursor(self._conn_factory) as (_, cur):
            # INSERT IGNORE: two concurrent first sign-ins must not fail each other.
            cur.execute(
                """
                INSERT IGNORE INTO profiles(user_id, name, roll_number, phone_number, role)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), name, roll_number, phone_number, role.value),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE user_id=%s", (int(user_id),))
            return row_to_profile(fetchone(cur))

    def update_fields(self, user_id: int, changes: dict) -> Optional[Profile]:
        fields = {k: v for k, v in changes.items() if k in ADMIN_EDITABLE_FIELDS}
        with db_cursor(self._conn_factory) as (_, cur):
            if fields:
                assignments = ", ".join(f"{k}=%s" for k in sorted(fields))
                params = [fields[k] for k in sorted(fields)] + [int(user_id)]
                cur.execute(f"UPDATE profiles SET {assignments} WHERE user_id=%s", tuple(params))
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return row_to_profile(row) if row else None

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            if role is None:
                cur.execute(f"SELECT {_COLUMNS} FROM profiles ORDER BY created_at DESC, user_id DESC")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM profiles WHERE role=%s ORDER BY created_at DESC, user_id DESC",
                    (Role(role).value,),
                )
            return [row_to_profile(r) for r in fetchall(cur)]

    def promote_to_admin(self, *, target_user_id: int, acting_user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            call_procedure(cur, "promote_to_admin", (int(target_user_id), int(acting_user_id)))

    def promote_to_warden(self, *, target_user_id: int, department: Optional[str], acting_user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            call_procedure(cur, "promote_to_warden", (int(target_user_id), department, int(acting_user_id)))

    def demote_to_student(self, *, target_user_id: int, acting_user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            call_procedure(cur, "demote_to_student", (int(target_user_id), int(acting_user_id)))
