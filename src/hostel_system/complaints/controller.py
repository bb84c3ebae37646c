from __future__ import annotations

from flask import Flask

from ..common.web import current_profile, json_body, login_required, ok


def register(app: Flask, container) -> None:
    service = container.complaint_service

    @app.route("/api/complaints", methods=["GET"], endpoint="complaints_list")
    @login_required
    def list_complaints():
        return ok(service.list_complaints(current_profile()))

    @app.route("/api/complaints", methods=["POST"], endpoint="complaints_create")
    @login_required
    def create_complaint():
        data = json_body()
        complaint = service.create_complaint(
            current_profile(),
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", ""),
            priority=data.get("priority") or "medium",
        )
        return ok(complaint, "Complaint submitted", 201)

    @app.route("/api/complaints/<int:complaint_id>/status", methods=["POST"], endpoint="complaints_status")
    @login_required
    def update_status(complaint_id: int):
        complaint = service.update_status(current_profile(), complaint_id, json_body().get("status", ""))
        return ok(complaint, f"Complaint marked {complaint.status.value}")
