from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.validators import require_int
from ..common.web import current_profile, json_body, login_required, ok


def register(app: Flask, container) -> None:
    service = container.room_service

    @app.route("/api/rooms", methods=["GET"], endpoint="rooms_list")
    @login_required
    def list_rooms():
        return ok(service.list_rooms(block=request.args.get("block")))

    @app.route("/api/bookings", methods=["GET"], endpoint="bookings_list")
    @login_required
    def list_bookings():
        return ok(service.list_bookings(current_profile()))

    @app.route("/api/bookings", methods=["POST"], endpoint="bookings_create")
    @login_required
    def create_booking():
        data = json_body()
        booking = service.book_room(
            current_profile(),
            require_int(data.get("room_id"), "Room"),
            parse_iso_date(data.get("start_date")),
            parse_optional_date(data.get("end_date")),
        )
        return ok(booking, "Booking request submitted", 201)

    @app.route("/api/bookings/<int:booking_id>/cancel", methods=["POST"], endpoint="bookings_cancel")
    @login_required
    def cancel_booking(booking_id: int):
        return ok(service.cancel_booking(current_profile(), booking_id), "Booking cancelled")

    @app.route("/api/bookings/<int:booking_id>/decision", methods=["POST"], endpoint="bookings_decide")
    @login_required
    def decide_booking(booking_id: int):
        approve = bool(json_body().get("approve"))
        booking = service.decide_booking(current_profile(), booking_id, approve=approve)
        return ok(booking, f"Booking {booking.status.value}")
