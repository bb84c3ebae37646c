from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.validators import require_int
from ..common.web import current_profile, json_body, login_required, ok, query_date
from ..core.exceptions import ValidationError
from .model import BulkMarkResult


def _bulk_payload(result: BulkMarkResult) -> dict:
    return {
        "date": result.date,
        "status": result.status,
        "succeeded": result.succeeded,
        "failed": result.failed,
        "failed_user_ids": result.failed_user_ids,
        "results": [
            {"user_id": uid, "ok": o.ok, "record": o.record, "error": o.error} for uid, o in result.outcomes
        ],
    }


def _bulk_message(result: BulkMarkResult) -> str:
    if result.failed:
        return f"Marked {result.succeeded} user(s); {result.failed} failed"
    return f"Marked {result.succeeded} user(s) as {result.status.value}"


def _optional_int(name: str):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    return require_int(raw, name)


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in():
        record = service.check_in(current_profile())
        return ok(record, "Checked in successfully")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out():
        record = service.check_out(current_profile())
        return ok(record, "Checked out successfully")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        actor = current_profile()
        return ok(
            {
                "mine": service.today_record(actor),
                "records": service.today(actor, user_id=_optional_int("user_id")),
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history():
        records = service.history(
            current_profile(),
            start=query_date("start"),
            end=query_date("end"),
            user_id=_optional_int("user_id"),
        )
        return ok(records)

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def stats():
        result = service.compute_statistics(
            current_profile(),
            start=query_date("start"),
            end=query_date("end"),
            user_id=_optional_int("user_id"),
        )
        if result is None:
            return ok({"stats": None}, "No attendance data for this period")
        return ok({"stats": result})

    @app.route("/api/attendance/mark", methods=["POST"], endpoint="attendance_mark")
    @login_required
    def mark():
        data = json_body()
        user_ids = data.get("user_ids") or []
        if not isinstance(user_ids, list):
            raise ValidationError("user_ids must be a list")
        result = service.bulk_mark(
            current_profile(),
            user_ids,
            data.get("status", ""),
            on=parse_optional_date(data.get("date")),
            notes=data.get("notes"),
        )
        return ok(_bulk_payload(result), _bulk_message(result))

    @app.route("/api/attendance/auto-absent", methods=["POST"], endpoint="attendance_auto_absent")
    @login_required
    def auto_absent():
        data = json_body()
        result = service.auto_mark_absent(current_profile(), on=parse_optional_date(data.get("date")))
        return ok(_bulk_payload(result), _bulk_message(result))

    @app.route("/api/attendance/settings", methods=["GET"], endpoint="attendance_settings_get")
    @login_required
    def get_settings():
        return ok(service.get_settings())

    @app.route("/api/attendance/settings", methods=["PUT", "PATCH"], endpoint="attendance_settings_update")
    @login_required
    def update_settings():
        settings = service.update_settings(current_profile(), json_body())
        return ok(settings, "Attendance settings updated")
