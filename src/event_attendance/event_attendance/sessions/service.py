from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional, Sequence

from ..access.context import ActorContext
from ..access.matrix import TargetDescriptor, is_unrestricted, require_access
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..common.datetime_utils import minutes_between
from ..common.validators import require_datetime, require_window
from ..core.enums import EventType, Operation
from ..core.exceptions import ForbiddenError, NotFoundError, ValidationError
from ..database.transactions import InProcessTransactions, TransactionManager
from ..events.model import Event
from ..events.repository import EventRepository
from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def describe_session(session: Session) -> TargetDescriptor:
    return TargetDescriptor(district_id=session.district_id, creator_id=session.created_by_id)


def derive_duration(start: datetime, end: datetime, supplied: Optional[int] = None) -> int:
    require_window(start, end)
    duration = math.ceil(minutes_between(start, end))
    if supplied is None:
        return duration
    try:
        supplied = int(supplied)
    except (TypeError, ValueError):
        raise ValidationError("durationMinutes must be a number")
    if supplied != duration:
        raise ValidationError(f"Duration ({supplied} minutes) does not match the session window ({duration} minutes)")
    return duration


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        events: EventRepository,
        attendance: AttendanceRepository,
        attendance_service: AttendanceService,
        *,
        transactions: TransactionManager | None = None,
    ):
        self._sessions = sessions
        self._events = events
        self._attendance = attendance
        self._attendance_service = attendance_service
        self._tx = transactions or InProcessTransactions()

    def _require_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    def _require_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def _check_weekly_budget(self, event: Event, duration: int, *, exclude_session_id: Optional[int] = None) -> None:
        if not event.weekly_constraint:
            return
        total = self._sessions.total_duration_for_event(event.event_id, exclude_session_id=exclude_session_id) + duration
        if total > event.minimum_minutes_per_week:
            raise ValidationError(
                f"Total session duration ({total} minutes) exceeds weekly constraint "
                f"of {event.minimum_minutes_per_week} minutes"
            )

    def list_sessions(
        self,
        ctx: ActorContext,
        *,
        event_id: Optional[int] = None,
        district_id: Optional[int] = None,
    ) -> Sequence[Session]:
        if not is_unrestricted(ctx, Operation.VIEW_SESSION):
            district_id = ctx.effective.district_id
            if district_id is None:
                return []
        return self._sessions.list_sessions(event_id=event_id, district_id=district_id)

    def get_session(self, ctx: ActorContext, session_id: int) -> Session:
        session = self._require_session(session_id)
        require_access(ctx, Operation.VIEW_SESSION, describe_session(session), message="You don't have access to this session")
        return session

    def create_session(
        self,
        ctx: ActorContext,
        *,
        event_id: int,
        district_id: int,
        start_time,
        end_time,
        duration_minutes: Optional[int] = None,
    ) -> Session:
        start = require_datetime(start_time, "startTime")
        end = require_datetime(end_time, "endTime")
        duration = derive_duration(start, end, duration_minutes)

        require_access(
            ctx,
            Operation.CREATE_SESSION,
            TargetDescriptor(district_id=int(district_id)),
            message="You can only create sessions in your district",
        )

        event = self._require_event(event_id)
        if event.event_type == EventType.SINGLE_DISTRICT and event.district_id is not None and event.district_id != int(district_id):
            raise ForbiddenError("Session district does not match event district")
        self._check_weekly_budget(event, duration)

        session_id = self._sessions.create(
            event_id=event.event_id,
            district_id=int(district_id),
            start_time=start,
            end_time=end,
            duration_minutes=duration,
            created_by_id=ctx.effective.user_id,
        )
        logger.info("session created: id=%s event=%s by=%s", session_id, event.event_id, ctx.actual.user_id)
        return self._require_session(session_id)

    def update_session(
        self,
        ctx: ActorContext,
        session_id: int,
        *,
        start_time=None,
        end_time=None,
        duration_minutes: Optional[int] = None,
    ) -> Session:
        session = self._require_session(session_id)
        require_access(ctx, Operation.EDIT_SESSION, describe_session(session), message="You can only edit sessions you created in your district")

        start = require_datetime(start_time, "startTime") if start_time is not None else session.start_time
        end = require_datetime(end_time, "endTime") if end_time is not None else session.end_time
        duration = derive_duration(start, end, duration_minutes)

        event = self._require_event(session.event_id)
        self._check_weekly_budget(event, duration, exclude_session_id=session.session_id)

        with self._tx.atomic(("session", session.session_id)):
            self._sessions.update_times(session.session_id, start_time=start, end_time=end, duration_minutes=duration)
            updated = self._require_session(session.session_id)
            if updated.start_time != session.start_time or updated.end_time != session.end_time:
                self._attendance_service.rescore_session(updated)

        logger.info("session updated: id=%s by=%s", session.session_id, ctx.actual.user_id)
        return updated

    def delete_session(self, ctx: ActorContext, session_id: int) -> None:
        session = self._require_session(session_id)
        require_access(ctx, Operation.DELETE_SESSION, describe_session(session), message="You can only delete sessions you created in your district")

        if self._attendance.count_for_session(session.session_id) > 0:
            raise ValidationError("Cannot delete session with existing attendance records")

        self._sessions.delete(session.session_id)
        logger.info("session deleted: id=%s by=%s", session.session_id, ctx.actual.user_id)
