from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import BookingStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_list, fetchall, fetchone
from .model import Room, RoomBooking
from .repository import RoomRepository

_ROOM_COLUMNS = "r.room_id, r.number, r.block, r.capacity, r.occupied, r.amenities, r.rent, r.available"

_BOOKING_SELECT = f"""
    SELECT b.booking_id, b.user_id, b.room_id, b.status, b.booking_date, b.start_date, b.end_date,
           b.created_at, {_ROOM_COLUMNS}
    FROM room_bookings b
    JOIN rooms r ON r.room_id = b.room_id
"""


def row_to_room(r: dict) -> Room:
    return Room(
        room_id=int(r["room_id"]),
        number=str(r["number"]),
        block=str(r["block"]),
        capacity=int(r["capacity"]),
        occupied=int(r["occupied"] or 0),
        amenities=decode_json_list(r.get("amenities")),
        rent=float(r.get("rent") or 0),
        available=bool(r["available"]),
    )


def row_to_booking(r: dict) -> RoomBooking:
    return RoomBooking(
        booking_id=int(r["booking_id"]),
        user_id=int(r["user_id"]),
        room_id=int(r["room_id"]),
        status=BookingStatus(r["status"]),
        booking_date=r["booking_date"],
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        created_at=r.get("created_at"),
        room=row_to_room(r),
    )


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_rooms(self, *, block: Optional[str] = None) -> Sequence[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            if block:
                cur.execute(
                    f"SELECT {_ROOM_COLUMNS} FROM rooms r WHERE r.block=%s ORDER BY r.block, r.number",
                    (block,),
                )
            else:
                cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms r ORDER BY r.block, r.number")
            return [row_to_room(r) for r in fetchall(cur)]

    def get_room(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ROOM_COLUMNS} FROM rooms r WHERE r.room_id=%s", (int(room_id),))
            r = fetchone(cur)
            return row_to_room(r) if r else None

    def list_bookings(self, *, user_id: Optional[int] = None) -> Sequence[RoomBooking]:
        sql = _BOOKING_SELECT
        params: tuple = ()
        if user_id is not None:
            sql += " WHERE b.user_id=%s"
            params = (int(user_id),)
        sql += " ORDER BY b.created_at DESC, b.booking_id DESC"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [row_to_booking(r) for r in fetchall(cur)]

    def _select_booking(self, cur, booking_id: int) -> Optional[RoomBooking]:
        cur.execute(_BOOKING_SELECT + " WHERE b.booking_id=%s", (int(booking_id),))
        r = fetchone(cur)
        return row_to_booking(r) if r else None

    def get_booking(self, booking_id: int) -> Optional[RoomBooking]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_booking(cur, booking_id)

    def create_booking(
        self,
        *,
        user_id: int,
        room_id: int,
        booking_date: date,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RoomBooking:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO room_bookings(user_id, room_id, status, booking_date, start_date, end_date)
                VALUES(%s,%s,'pending',%s,%s,%s)
                """,
                (int(user_id), int(room_id), booking_date, start_date, end_date),
            )
            return self._select_booking(cur, int(cur.lastrowid))

    def approve_booking(self, booking_id: int) -> RoomBooking:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT booking_id, room_id, status FROM room_bookings WHERE booking_id=%s FOR UPDATE",
                (int(booking_id),),
            )
            b = fetchone(cur)
            if not b:
                raise NotFoundError("Booking not found")
            if b["status"] != BookingStatus.PENDING.value:
                raise ValidationError("Only pending bookings can be approved")

            cur.execute("SELECT capacity, occupied FROM rooms WHERE room_id=%s FOR UPDATE", (int(b["room_id"]),))
            room = fetchone(cur)
            if int(room["occupied"]) >= int(room["capacity"]):
                raise ValidationError("Room is already full")

            cur.execute(
                """
                UPDATE rooms
                SET occupied = occupied + 1,
                    available = (occupied < capacity)
                WHERE room_id=%s
                """,
                (int(b["room_id"]),),
            )
            cur.execute("UPDATE room_bookings SET status='approved' WHERE booking_id=%s", (int(booking_id),))
            return self._select_booking(cur, booking_id)

    def close_booking(self, booking_id: int, status: BookingStatus) -> RoomBooking:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT booking_id, room_id, status FROM room_bookings WHERE booking_id=%s FOR UPDATE",
                (int(booking_id),),
            )
            b = fetchone(cur)
            if not b:
                raise NotFoundError("Booking not found")

            if b["status"] == BookingStatus.APPROVED.value:
                cur.execute(
                    "UPDATE rooms SET occupied = GREATEST(occupied - 1, 0), available = 1 WHERE room_id=%s",
                    (int(b["room_id"]),),
                )
            cur.execute(
                "UPDATE room_bookings SET status=%s WHERE booking_id=%s",
                (BookingStatus(status).value, int(booking_id)),
            )
            return self._select_booking(cur, booking_id)
