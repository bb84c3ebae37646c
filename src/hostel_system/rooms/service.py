from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import BookingStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..core.permissions import Capability, has_capability, require_capability
from ..notifications.service import NotificationService
from ..profiles.model import Profile
from .model import Room, RoomBooking
from .repository import RoomRepository

logger = logging.getLogger(__name__)


class RoomService:
    def __init__(self, rooms: RoomRepository, notifications: Optional[NotificationService] = None):
        self._rooms = rooms
        self._notifications = notifications

    def list_rooms(self, *, block: Optional[str] = None) -> Sequence[Room]:
        return self._rooms.list_rooms(block=(block or "").strip() or None)

    def list_bookings(self, actor: Profile) -> Sequence[RoomBooking]:
        if has_capability(actor.role, Capability.DECIDE_BOOKINGS):
            return self._rooms.list_bookings()
        return self._rooms.list_bookings(user_id=actor.user_id)

    def book_room(
        self,
        actor: Profile,
        room_id: int,
        start_date: date,
        end_date: Optional[date] = None,
        *,
        now: Optional[datetime] = None,
    ) -> RoomBooking:
        require_capability(actor.role, Capability.BOOK_ROOM)
        today = (now or now_local()).date()

        room = self._rooms.get_room(int(room_id))
        if room is None:
            raise NotFoundError("Room not found")
        if not room.available or room.is_full:
            raise ValidationError(f"Room {room.block}-{room.number} is not available")
        if start_date < today:
            raise ValidationError("Start date cannot be in the past")
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date must be on or after the start date")

        if any(b.is_active for b in self._rooms.list_bookings(user_id=actor.user_id)):
            raise ValidationError("You already have an active booking")

        booking = self._rooms.create_booking(
            user_id=actor.user_id,
            room_id=room.room_id,
            booking_date=today,
            start_date=start_date,
            end_date=end_date,
        )
        logger.info("User %s requested room %s (booking %s)", actor.user_id, room.room_id, booking.booking_id)
        return booking

    def cancel_booking(self, actor: Profile, booking_id: int) -> RoomBooking:
        booking = self._rooms.get_booking(int(booking_id))
        if booking is None:
            raise NotFoundError("Booking not found")
        if booking.user_id != actor.user_id:
            raise AuthorizationError("You can only cancel your own bookings")
        if not booking.is_active:
            raise ValidationError(f"A {booking.status.value} booking cannot be cancelled")
        return self._rooms.close_booking(booking.booking_id, BookingStatus.CANCELLED)

    def decide_booking(self, actor: Profile, booking_id: int, *, approve: bool) -> RoomBooking:
        require_capability(actor.role, Capability.DECIDE_BOOKINGS)
        booking = self._rooms.get_booking(int(booking_id))
        if booking is None:
            raise NotFoundError("Booking not found")
        if booking.status != BookingStatus.PENDING:
            raise ValidationError("Only pending bookings can be decided")

        if approve:
            decided = self._rooms.approve_booking(booking.booking_id)
        else:
            decided = self._rooms.close_booking(booking.booking_id, BookingStatus.REJECTED)

        logger.info("User %s %s booking %s", actor.user_id, decided.status.value, decided.booking_id)
        if self._notifications:
            self._notifications.send(
                to=f"user:{decided.user_id}",
                subject=f"Room booking {decided.status.value}",
                message=f"Your booking request #{decided.booking_id} was {decided.status.value}.",
                type="room_booking",
            )
        return decided
