from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..access.context import ActorContext
from ..access.matrix import TargetDescriptor, check_access, is_unrestricted, require_access
from ..attendance.repository import AttendanceRepository
from ..common.slug import unique_slug
from ..common.validators import (
    optional_int,
    require_bool,
    require_datetime,
    require_non_empty,
    require_percentage,
    require_positive_int,
)
from ..core.constants import DEFAULT_MINIMUM_MINUTES_PER_WEEK, DEFAULT_PASS_MARK
from ..core.enums import EventType, Operation
from ..core.exceptions import NotFoundError, ValidationError
from .model import Event, NewEvent
from .repository import EventRepository

logger = logging.getLogger(__name__)


def describe_event(event: Event) -> TargetDescriptor:
    return TargetDescriptor(district_id=event.district_id, creator_id=event.creator_id)


def parse_event_type(value) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise ValidationError(f"Unknown event type: {value!r}")


class EventService:
    def __init__(
        self,
        events: EventRepository,
        attendance: AttendanceRepository,
        *,
        default_pass_mark: int = DEFAULT_PASS_MARK,
        default_minimum_minutes: int = DEFAULT_MINIMUM_MINUTES_PER_WEEK,
    ):
        self._events = events
        self._attendance = attendance
        self._default_pass_mark = int(default_pass_mark)
        self._default_minimum_minutes = int(default_minimum_minutes)

    def _find(self, identifier) -> Event:
        """Look an event up by numeric id or slug."""
        event = None
        if isinstance(identifier, int) or str(identifier).isdigit():
            event = self._events.get_by_id(int(identifier))
        if event is None:
            event = self._events.get_by_slug(str(identifier))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _slug_for(self, title: str, *, exclude_event_id: Optional[int] = None) -> str:
        def taken(slug: str) -> bool:
            existing = self._events.get_by_slug(slug)
            return existing is not None and existing.event_id != exclude_event_id

        return unique_slug(title, taken)

    def list_events(
        self,
        ctx: ActorContext,
        *,
        event_type: Optional[EventType] = None,
        district_id: Optional[int] = None,
    ) -> Sequence[Event]:
        if is_unrestricted(ctx, Operation.VIEW_EVENT):
            return self._events.list_events(district_id=district_id, event_type=event_type)
        events = self._events.list_events(visible_to_district=ctx.effective.district_id, event_type=event_type)
        # a member without a district only ever sees multi-district events
        return [e for e in events if check_access(ctx, Operation.VIEW_EVENT, describe_event(e))]

    def get_event(self, ctx: ActorContext, identifier) -> Event:
        event = self._find(identifier)
        require_access(ctx, Operation.VIEW_EVENT, describe_event(event), message="You don't have access to this event")
        return event

    def create_event(
        self,
        ctx: ActorContext,
        *,
        title: str,
        event_type,
        start_date,
        end_date=None,
        district_id: Optional[int] = None,
        pass_mark: Optional[int] = None,
        weekly_constraint: bool = False,
        minimum_minutes_per_week: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Event:
        title = require_non_empty(title, "Title")
        kind = parse_event_type(event_type)
        start = require_datetime(start_date, "startDate")
        end = require_datetime(end_date, "endDate") if end_date else None
        if end is not None and end < start:
            raise ValidationError("End date cannot be before start date")

        district = optional_int(district_id)
        if kind == EventType.SINGLE_DISTRICT and district is None:
            raise ValidationError("District required for single-district events")
        if kind == EventType.MULTI_DISTRICT:
            district = None

        require_access(
            ctx,
            Operation.CREATE_EVENT,
            TargetDescriptor(district_id=district),
            message="You can only create events in your own district",
        )

        mark = require_percentage(pass_mark, "Pass mark") if pass_mark is not None else self._default_pass_mark
        weekly = require_bool(weekly_constraint, "weeklyConstraint") if weekly_constraint is not None else False
        minimum = self._default_minimum_minutes
        if weekly and minimum_minutes_per_week is not None:
            minimum = require_positive_int(minimum_minutes_per_week, "Minimum minutes per week")

        event_id = self._events.create(
            NewEvent(
                title=title,
                slug=self._slug_for(title),
                event_type=kind,
                start_date=start,
                end_date=end,
                district_id=district,
                creator_id=ctx.effective.user_id,
                pass_mark=mark,
                weekly_constraint=weekly,
                minimum_minutes_per_week=minimum,
                description=(description or "").strip() or None,
            )
        )
        logger.info("event created: id=%s type=%s by=%s", event_id, kind.value, ctx.actual.user_id)
        return self._find(event_id)

    def update_event(self, ctx: ActorContext, identifier, **changes) -> Event:
        event = self._find(identifier)
        require_access(ctx, Operation.EDIT_EVENT, describe_event(event), message="You can only edit events you created in your district")

        fields: dict = {}

        if "title" in changes and changes["title"] is not None:
            fields["title"] = require_non_empty(changes["title"], "Title")
            fields["slug"] = self._slug_for(fields["title"], exclude_event_id=event.event_id)

        if "description" in changes:
            fields["description"] = (changes["description"] or "").strip() or None

        if "event_type" in changes and changes["event_type"] is not None:
            kind = parse_event_type(changes["event_type"])
            if kind != event.event_type:
                require_access(ctx, Operation.CHANGE_EVENT_SCOPE, message="Only admins can change event type")
                fields["event_type"] = kind

        if "district_id" in changes:
            district = optional_int(changes["district_id"])
            if district != event.district_id:
                require_access(ctx, Operation.CHANGE_EVENT_SCOPE, message="Only admins can change the district")
                fields["district_id"] = district

        kind = fields.get("event_type", event.event_type)
        district = fields.get("district_id", event.district_id)
        if kind == EventType.SINGLE_DISTRICT and district is None:
            raise ValidationError("District required for single-district events")
        if kind == EventType.MULTI_DISTRICT and district is not None:
            fields["district_id"] = None

        if "start_date" in changes and changes["start_date"] is not None:
            fields["start_date"] = require_datetime(changes["start_date"], "startDate")
        if "end_date" in changes:
            fields["end_date"] = require_datetime(changes["end_date"], "endDate") if changes["end_date"] else None
        start = fields.get("start_date", event.start_date)
        end = fields.get("end_date", event.end_date)
        if end is not None and end < start:
            raise ValidationError("End date cannot be before start date")

        if "pass_mark" in changes and changes["pass_mark"] is not None:
            fields["pass_mark"] = require_percentage(changes["pass_mark"], "Pass mark")

        if "weekly_constraint" in changes and changes["weekly_constraint"] is not None:
            fields["weekly_constraint"] = require_bool(changes["weekly_constraint"], "weeklyConstraint")
        if "minimum_minutes_per_week" in changes and changes["minimum_minutes_per_week"] is not None:
            fields["minimum_minutes_per_week"] = require_positive_int(
                changes["minimum_minutes_per_week"], "Minimum minutes per week"
            )

        if fields:
            self._events.update(event.event_id, **fields)
            logger.info("event updated: id=%s fields=%s by=%s", event.event_id, sorted(fields), ctx.actual.user_id)
        return self._find(event.event_id)

    def delete_event(self, ctx: ActorContext, identifier) -> None:
        event = self._find(identifier)
        require_access(ctx, Operation.DELETE_EVENT, describe_event(event), message="You can only delete events you created in your district")

        if self._attendance.count_for_event(event.event_id) > 0:
            raise ValidationError("Cannot delete event with existing attendance records")

        self._events.delete(event.event_id)
        logger.info("event deleted: id=%s by=%s", event.event_id, ctx.actual.user_id)
