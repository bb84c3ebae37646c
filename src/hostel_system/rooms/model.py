from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import BookingStatus


@dataclass(frozen=True)
class Room:
    room_id: int
    number: str
    block: str
    capacity: int
    occupied: int = 0
    amenities: list[str] = field(default_factory=list)
    rent: float = 0.0
    available: bool = True

    @property
    def is_full(self) -> bool:
        return self.occupied >= self.capacity

    @property
    def free_beds(self) -> int:
        return max(0, self.capacity - self.occupied)


@dataclass(frozen=True)
class RoomBooking:
    booking_id: int
    user_id: int
    room_id: int
    status: BookingStatus
    booking_date: date
    start_date: date
    end_date: Optional[date] = None
    created_at: Optional[datetime] = None
    room: Optional[Room] = None

    @property
    def is_active(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.APPROVED)
