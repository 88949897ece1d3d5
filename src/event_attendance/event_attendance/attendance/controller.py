from __future__ import annotations

from flask import Flask

from ..container import Container
from ..core.exceptions import ValidationError
from ..web import actor_context, int_arg, iso, json_body, ok, optional_body_int, required_int
from .model import AttendanceRecord, EventAttendanceSummary, ScoreResult, SessionAttendance


def record_dict(record: AttendanceRecord) -> dict:
    return {
        "id": record.attendance_id,
        "userId": record.user_id,
        "sessionId": record.session_id,
        "arrivalTime": iso(record.arrival_time),
        "percentageScore": record.percentage_score,
        "createdBy": record.created_by_id,
        "createdAt": iso(record.created_at),
    }


def history_dict(row: SessionAttendance) -> dict:
    return {
        "id": row.attendance_id,
        "userId": row.user_id,
        "sessionId": row.session_id,
        "eventId": row.event_id,
        "arrivalTime": iso(row.arrival_time),
        "percentageScore": row.percentage_score,
        "sessionStart": iso(row.session_start),
        "sessionEnd": iso(row.session_end),
        "durationMinutes": row.session_duration_minutes,
        "districtId": row.session_district_id,
    }


def summary_row_dict(summary: EventAttendanceSummary) -> dict:
    return {
        "userId": summary.user_id,
        "eventId": summary.event_id,
        "cumulative": summary.cumulative,
        "skip": summary.skip,
    }


def score_payload(result: ScoreResult) -> dict:
    data = record_dict(result.attendance)
    data["details"] = result.breakdown.as_dict()
    data["summary"] = result.summary.as_dict()
    return data


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/v1/attendance", methods=["GET"], endpoint="attendance_list")
    def list_attendance():
        ctx = actor_context(container)
        user_id = int_arg("userId") or ctx.effective.user_id
        event_id = int_arg("eventId")
        if event_id is not None:
            rows = service.list_event_attendance(ctx, user_id, event_id)
        else:
            rows = service.list_user_attendance(ctx, user_id)
        return ok([history_dict(r) for r in rows])

    @app.route("/api/v1/attendance", methods=["POST"], endpoint="attendance_submit")
    def submit_attendance():
        ctx = actor_context(container)
        body = json_body()
        if not body.get("arrivalTime"):
            raise ValidationError("arrivalTime is required")
        target = optional_body_int(body, "userId")
        result = service.submit(
            ctx,
            target if target is not None else ctx.effective.user_id,
            required_int(body, "sessionId"),
            body["arrivalTime"],
        )
        return ok(score_payload(result), message=result.message, status=201)

    @app.route("/api/v1/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    def get_attendance(attendance_id: int):
        ctx = actor_context(container)
        return ok(record_dict(service.get_attendance(ctx, attendance_id)))

    @app.route("/api/v1/attendance/<int:attendance_id>", methods=["PATCH", "PUT"], endpoint="attendance_update")
    def update_attendance(attendance_id: int):
        ctx = actor_context(container)
        body = json_body()
        if not body.get("arrivalTime"):
            raise ValidationError("arrivalTime is required")
        result = service.update_arrival(ctx, attendance_id, body["arrivalTime"])
        return ok(score_payload(result), message="Attendance updated")

    @app.route("/api/v1/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete_attendance(attendance_id: int):
        ctx = actor_context(container)
        summary = service.delete_attendance(ctx, attendance_id)
        return ok({"summary": summary.as_dict()}, message="Attendance deleted")

    @app.route("/api/v1/events/<int:event_id>/summary", methods=["GET"], endpoint="attendance_summary")
    def event_summary(event_id: int):
        ctx = actor_context(container)
        user_id = int_arg("userId") or ctx.effective.user_id
        return ok(service.get_summary(ctx, user_id, event_id).as_dict())

    @app.route("/api/v1/summaries", methods=["GET"], endpoint="attendance_summaries")
    def list_summaries():
        ctx = actor_context(container)
        user_id = int_arg("userId") or ctx.effective.user_id
        return ok([summary_row_dict(s) for s in service.list_user_summaries(ctx, user_id)])

    @app.route("/api/v1/events/<int:event_id>/skip", methods=["POST"], endpoint="attendance_skip")
    def skip_user(event_id: int):
        ctx = actor_context(container)
        result = service.skip_user(ctx, event_id, required_int(json_body(), "userId"))
        return ok(result.as_dict(), message="User skipped for this event")

    @app.route("/api/v1/events/<int:event_id>/skip", methods=["DELETE"], endpoint="attendance_unskip")
    def unskip_user(event_id: int):
        ctx = actor_context(container)
        user_id = int_arg("userId")
        if user_id is None:
            user_id = required_int(json_body(), "userId")
        result = service.unskip_user(ctx, event_id, user_id)
        return ok(result.as_dict(), message="User no longer skipped for this event")
