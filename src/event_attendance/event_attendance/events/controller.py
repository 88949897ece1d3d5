from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..web import actor_context, int_arg, iso, json_body, ok
from .model import Event
from .service import parse_event_type

# JSON field -> service keyword for partial updates.
_UPDATE_FIELDS = {
    "title": "title",
    "description": "description",
    "eventType": "event_type",
    "districtId": "district_id",
    "startDate": "start_date",
    "endDate": "end_date",
    "passMark": "pass_mark",
    "weeklyConstraint": "weekly_constraint",
    "minimumMinutesPerWeek": "minimum_minutes_per_week",
}


def event_dict(event: Event) -> dict:
    return {
        "id": event.event_id,
        "title": event.title,
        "slug": event.slug,
        "eventType": event.event_type.value,
        "startDate": iso(event.start_date),
        "endDate": iso(event.end_date),
        "districtId": event.district_id,
        "creatorId": event.creator_id,
        "passMark": event.pass_mark,
        "weeklyConstraint": event.weekly_constraint,
        "minimumMinutesPerWeek": event.minimum_minutes_per_week,
        "description": event.description,
    }


def register(app: Flask, container: Container) -> None:
    service = container.event_service

    @app.route("/api/v1/events", methods=["GET"], endpoint="events_list")
    def list_events():
        ctx = actor_context(container)
        kind = request.args.get("eventType")
        events = service.list_events(
            ctx,
            event_type=parse_event_type(kind) if kind else None,
            district_id=int_arg("districtId"),
        )
        return ok([event_dict(e) for e in events])

    @app.route("/api/v1/events", methods=["POST"], endpoint="events_create")
    def create_event():
        ctx = actor_context(container)
        body = json_body()
        event = service.create_event(
            ctx,
            title=body.get("title"),
            event_type=body.get("eventType"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
            district_id=body.get("districtId"),
            pass_mark=body.get("passMark"),
            weekly_constraint=body.get("weeklyConstraint", False),
            minimum_minutes_per_week=body.get("minimumMinutesPerWeek"),
            description=body.get("description"),
        )
        return ok(event_dict(event), message="Event created", status=201)

    @app.route("/api/v1/events/<identifier>", methods=["GET"], endpoint="events_get")
    def get_event(identifier: str):
        ctx = actor_context(container)
        return ok(event_dict(service.get_event(ctx, identifier)))

    @app.route("/api/v1/events/<identifier>", methods=["PATCH", "PUT"], endpoint="events_update")
    def update_event(identifier: str):
        ctx = actor_context(container)
        body = json_body()
        changes = {kw: body[key] for key, kw in _UPDATE_FIELDS.items() if key in body}
        event = service.update_event(ctx, identifier, **changes)
        return ok(event_dict(event), message="Event updated")

    @app.route("/api/v1/events/<identifier>", methods=["DELETE"], endpoint="events_delete")
    def delete_event(identifier: str):
        ctx = actor_context(container)
        service.delete_event(ctx, identifier)
        return ok(message="Event deleted")
