from __future__ import annotations

from flask import Flask

from ..container import Container
from ..core.exceptions import ValidationError
from ..scoring.window import format_time_remaining
from ..web import actor_context, int_arg, iso, json_body, ok, required_int
from .model import Session


def session_dict(session: Session) -> dict:
    return {
        "id": session.session_id,
        "eventId": session.event_id,
        "districtId": session.district_id,
        "startTime": iso(session.start_time),
        "endTime": iso(session.end_time),
        "durationMinutes": session.duration_minutes,
        "createdBy": session.created_by_id,
        "attendanceCount": session.attendance_count,
    }


def register(app: Flask, container: Container) -> None:
    service = container.session_service

    @app.route("/api/v1/sessions", methods=["GET"], endpoint="sessions_list")
    def list_sessions():
        ctx = actor_context(container)
        sessions = service.list_sessions(ctx, event_id=int_arg("eventId"), district_id=int_arg("districtId"))
        return ok([session_dict(s) for s in sessions])

    @app.route("/api/v1/sessions", methods=["POST"], endpoint="sessions_create")
    def create_session():
        ctx = actor_context(container)
        body = json_body()
        for field in ("startTime", "endTime"):
            if not body.get(field):
                raise ValidationError(f"{field} is required")
        created = service.create_session(
            ctx,
            event_id=required_int(body, "eventId"),
            district_id=required_int(body, "districtId"),
            start_time=body["startTime"],
            end_time=body["endTime"],
            duration_minutes=body.get("durationMinutes"),
        )
        return ok(session_dict(created), message="Session created", status=201)

    @app.route("/api/v1/sessions/<int:session_id>", methods=["GET"], endpoint="sessions_get")
    def get_session(session_id: int):
        ctx = actor_context(container)
        return ok(session_dict(service.get_session(ctx, session_id)))

    @app.route("/api/v1/sessions/<int:session_id>", methods=["PATCH", "PUT"], endpoint="sessions_update")
    def update_session(session_id: int):
        ctx = actor_context(container)
        body = json_body()
        updated = service.update_session(
            ctx,
            session_id,
            start_time=body.get("startTime"),
            end_time=body.get("endTime"),
            duration_minutes=body.get("durationMinutes"),
        )
        return ok(session_dict(updated), message="Session updated")

    @app.route("/api/v1/sessions/<int:session_id>", methods=["DELETE"], endpoint="sessions_delete")
    def delete_session(session_id: int):
        ctx = actor_context(container)
        service.delete_session(ctx, session_id)
        return ok(message="Session deleted")

    @app.route("/api/v1/sessions/<int:session_id>/window", methods=["GET"], endpoint="sessions_window")
    def submission_window(session_id: int):
        ctx = actor_context(container)
        service.get_session(ctx, session_id)
        remaining = container.attendance_service.minutes_remaining(session_id)
        return ok(
            {
                "sessionId": session_id,
                "isOpen": container.attendance_service.is_window_open(session_id),
                "minutesRemaining": remaining,
                "label": format_time_remaining(remaining),
            }
        )
