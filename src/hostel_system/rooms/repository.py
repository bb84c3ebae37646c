from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import BookingStatus
from .model import Room, RoomBooking


class RoomRepository(Protocol):
    def list_rooms(self, *, block: Optional[str] = None) -> Sequence[Room]:
        raise NotImplementedError

    def get_room(self, room_id: int) -> Optional[Room]:
        raise NotImplementedError

    def list_bookings(self, *, user_id: Optional[int] = None) -> Sequence[RoomBooking]:
        """Newest first, each with its room joined."""

        raise NotImplementedError

    def get_booking(self, booking_id: int) -> Optional[RoomBooking]:
        raise NotImplementedError

    def create_booking(
        self,
        *,
        user_id: int,
        room_id: int,
        booking_date: date,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> RoomBooking:
        raise NotImplementedError

    def approve_booking(self, booking_id: int) -> RoomBooking:
        """Approve a pending booking and take one bed in the same transaction.

        Raises ValidationError when the room filled up in the meantime.
        """

        raise NotImplementedError

    def close_booking(self, booking_id: int, status: BookingStatus) -> RoomBooking:
        """Move a booking to rejected/cancelled, releasing its bed if it was approved."""

        raise NotImplementedError
