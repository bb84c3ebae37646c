from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import call_procedure, db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord, AttendanceSettings, AttendeeSummary
from .repository import AttendanceRepository

_RECORD_COLUMNS = (
    "a.attendance_id, a.user_id, a.date, a.status, a.check_in_time, a.check_out_time, "
    "a.notes, a.marked_by, a.created_at, a.updated_at"
)

_SETTINGS_FIELDS = (
    "check_in_start",
    "check_in_end",
    "check_out_start",
    "check_out_end",
    "late_threshold_minutes",
    "auto_mark_absent_after",
)


def row_to_record(r: dict) -> AttendanceRecord:
    user = None
    if r.get("user_name") is not None:
        user = AttendeeSummary(
            name=r["user_name"],
            roll_number=r.get("user_roll_number") or "",
            room_number=r.get("user_room_number"),
            hostel_block=r.get("user_hostel_block"),
        )
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        date=r["date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        notes=r.get("notes"),
        marked_by=r.get("marked_by"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        user=user,
    )


def row_to_settings(r: dict) -> AttendanceSettings:
    return AttendanceSettings(
        check_in_start=normalize_mysql_time(r["check_in_start"]),
        check_in_end=normalize_mysql_time(r["check_in_end"]),
        check_out_start=normalize_mysql_time(r["check_out_start"]),
        check_out_end=normalize_mysql_time(r["check_out_end"]),
        late_threshold_minutes=int(r["late_threshold_minutes"]),
        auto_mark_absent_after=normalize_mysql_time(r["auto_mark_absent_after"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, user_id: int, on: date) -> Optional[AttendanceRecord]:
        cur.execute(
            f"SELECT {_RECORD_COLUMNS} FROM attendance_records a WHERE a.user_id=%s AND a.date=%s",
            (int(user_id), on),
        )
        r = fetchone(cur)
        return row_to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, on: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, user_id, on)

    def upsert_check_in(self, *, user_id: int, on: date, check_in_time: datetime) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, date, status, check_in_time, marked_by)
                VALUES(%s,%s,'present',%s,%s)
                ON DUPLICATE KEY UPDATE
                    status='present',
                    check_in_time=VALUES(check_in_time),
                    marked_by=VALUES(marked_by)
                """,
                (int(user_id), on, check_in_time, int(user_id)),
            )
            return self._select_one(cur, user_id, on)

    def set_check_out(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET check_out_time=%s WHERE attendance_id=%s",
                (check_out_time, int(attendance_id)),
            )
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records a WHERE a.attendance_id=%s",
                (int(attendance_id),),
            )
            return row_to_record(fetchone(cur))

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
        with db_cursor(self._conn_factory) as (_, cur):
            rows = call_procedure(
                cur,
                "mark_attendance",
                (int(user_id), on, AttendanceStatus(status).value, marked_at, notes, int(acting_user_id)),
            )
            if rows:
                return row_to_record(rows[0])
            return self._select_one(cur, user_id, on)

    def list_range(
        self,
        *,
        start: date,
        end: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        sql = f"""
            SELECT {_RECORD_COLUMNS},
                   p.name AS user_name,
                   p.roll_number AS user_roll_number,
                   p.room_number AS user_room_number,
                   p.hostel_block AS user_hostel_block
            FROM attendance_records a
            LEFT JOIN profiles p ON p.user_id = a.user_id
            WHERE a.date BETWEEN %s AND %s
        """
        params: list = [start, end]
        if user_id is not None:
            sql += " AND a.user_id=%s"
            params.append(int(user_id))
        sql += " ORDER BY a.date DESC, a.attendance_id DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [row_to_record(r) for r in fetchall(cur)]

    def get_settings(self) -> AttendanceSettings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT IGNORE INTO attendance_settings(id) VALUES(1)")
            cur.execute(f"SELECT {', '.join(_SETTINGS_FIELDS)} FROM attendance_settings WHERE id=1")
            return row_to_settings(fetchone(cur))

    def update_settings(self, changes: dict) -> AttendanceSettings:
        fields = {k: v for k, v in changes.items() if k in _SETTINGS_FIELDS}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT IGNORE INTO attendance_settings(id) VALUES(1)")
            if fields:
                assignments = ", ".join(f"{k}=%s" for k in sorted(fields))
                cur.execute(
                    f"UPDATE attendance_settings SET {assignments} WHERE id=1",
                    tuple(fields[k] for k in sorted(fields)),
                )
            cur.execute(f"SELECT {', '.join(_SETTINGS_FIELDS)} FROM attendance_settings WHERE id=1")
            return row_to_settings(fetchone(cur))
