from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..access.context import ActorContext
from ..access.matrix import check_access, require_access
from ..common.datetime_utils import now_utc
from ..common.validators import require_datetime
from ..core.constants import SKIPPED_CUMULATIVE, SUBMISSION_WINDOW_DAYS
from ..core.enums import Operation
from ..core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..database.transactions import InProcessTransactions, TransactionManager
from ..events.model import Event
from ..events.repository import EventRepository
from ..scoring.calculator import calculate_score
from ..scoring.factory import ScoringStrategyFactory
from ..scoring.window import (
    EVENT_ENDED,
    EVENT_NOT_STARTED,
    event_range_status,
    is_session_open,
    minutes_remaining_to_submit,
)
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..users.model import User
from ..users.repository import UserRepository
from ..users.service import describe_user
from .aggregator import CumulativeAggregator
from .model import AttendanceRecord, EventAttendanceSummary, ScoreResult, SessionAttendance, SummaryResult
from .repository import AttendanceRepository, SummaryRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        summaries: SummaryRepository,
        sessions: SessionRepository,
        events: EventRepository,
        users: UserRepository,
        *,
        transactions: TransactionManager | None = None,
        strategy_factory: ScoringStrategyFactory | None = None,
        aggregator: CumulativeAggregator | None = None,
        window_days: int = SUBMISSION_WINDOW_DAYS,
    ):
        self._attendance = attendance
        self._summaries = summaries
        self._sessions = sessions
        self._events = events
        self._users = users
        self._tx = transactions or InProcessTransactions()
        self._factory = strategy_factory or ScoringStrategyFactory()
        self._aggregator = aggregator or CumulativeAggregator()
        self._window_days = int(window_days)

    # ---- lookups ----

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

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _require_attendance(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    # ---- submission ----

    def submit(
        self,
        ctx: ActorContext,
        target_user_id: int,
        session_id: int,
        arrival_time,
        *,
        now: Optional[datetime] = None,
    ) -> ScoreResult:
        now = now or now_utc()
        arrival = require_datetime(arrival_time, "arrivalTime")
        if arrival > now:
            raise ValidationError("Arrival time cannot be in the future")

        session = self._require_session(session_id)
        event = self._require_event(session.event_id)
        target = self._require_user(target_user_id)

        self._authorize_submission(ctx, target, session)
        self._check_submission_window(ctx, session, event, now)

        with self._tx.atomic((target.user_id, event.event_id)):
            self._summaries.lock(target.user_id, event.event_id)

            existing = self._attendance.get_for_user_and_session(target.user_id, session.session_id)
            if existing:
                raise self._duplicate(ctx, target, existing)

            summary = self._summaries.get(target.user_id, event.event_id)
            if summary and summary.skip:
                logger.warning("submission for skipped user: user=%s event=%s", target.user_id, event.event_id)
                raise ForbiddenError(
                    "User is skipped for this event and does not need to submit attendance",
                    code="USER_SKIPPED",
                )

            breakdown = calculate_score(arrival, session.start_time, session.end_time, factory=self._factory)
            attendance_id = self._attendance.create(
                user_id=target.user_id,
                session_id=session.session_id,
                arrival_time=arrival,
                percentage_score=breakdown.percentage_score,
                created_by_id=ctx.actual.user_id,
            )
            result = self._recompute(target.user_id, event)
            record = self._require_attendance(attendance_id)

        logger.info(
            "attendance recorded: user=%s session=%s score=%s by=%s",
            target.user_id,
            session.session_id,
            breakdown.percentage_score,
            ctx.actual.user_id,
        )
        return ScoreResult(attendance=record, breakdown=breakdown, summary=result)

    def _authorize_submission(self, ctx: ActorContext, target: User, session: Session) -> None:
        if target.user_id != ctx.effective.user_id:
            require_access(
                ctx,
                Operation.RECORD_ATTENDANCE_FOR,
                describe_user(target),
                message="Not authorized to record attendance for this user",
            )
        if target.district_id != session.district_id:
            logger.warning("submission outside district: user=%s session=%s", target.user_id, session.session_id)
            raise ForbiddenError("You are not authorized to submit attendance for this session")

    def _check_submission_window(self, ctx: ActorContext, session: Session, event: Event, now: datetime) -> None:
        # Bound to the real actor: an admin acting as a member keeps the event-range rule.
        if check_access(ctx, Operation.BYPASS_SUBMISSION_WINDOW).allowed:
            status = event_range_status(event.start_date, event.end_date, now)
            if status == EVENT_NOT_STARTED:
                raise ForbiddenError("Event has not started yet", code="EVENT_NOT_STARTED")
            if status == EVENT_ENDED:
                raise ForbiddenError("Event has ended", code="EVENT_ENDED")
            return

        if not is_session_open(session.start_time, now, window_days=self._window_days):
            logger.warning("submission outside window: user=%s session=%s", ctx.actual.user_id, session.session_id)
            raise ForbiddenError("Session is not open for submissions", code="WINDOW_CLOSED")

    def _duplicate(self, ctx: ActorContext, target: User, existing: AttendanceRecord) -> ConflictError:
        real = ActorContext.for_actor(ctx.actual)
        can_edit = check_access(real, Operation.EDIT_ATTENDANCE, describe_user(target)).allowed
        return ConflictError(
            "Already submitted attendance for this session",
            code="ATTENDANCE_EXISTS",
            existing_id=existing.attendance_id,
            can_edit=can_edit,
        )

    # ---- elevated edit path ----

    def update_arrival(
        self,
        ctx: ActorContext,
        attendance_id: int,
        arrival_time,
        *,
        now: Optional[datetime] = None,
    ) -> ScoreResult:
        now = now or now_utc()
        arrival = require_datetime(arrival_time, "arrivalTime")
        if arrival > now:
            raise ValidationError("Arrival time cannot be in the future")

        record = self._require_attendance(attendance_id)
        owner = self._require_user(record.user_id)
        if record.user_id == ctx.effective.user_id and not ctx.effective.role.is_privileged:
            raise ForbiddenError("Cannot edit your own attendance")
        require_access(ctx, Operation.EDIT_ATTENDANCE, describe_user(owner), message="Not authorized to edit this attendance")

        session = self._require_session(record.session_id)
        event = self._require_event(session.event_id)

        with self._tx.atomic((owner.user_id, event.event_id)):
            self._summaries.lock(owner.user_id, event.event_id)
            breakdown = calculate_score(arrival, session.start_time, session.end_time, factory=self._factory)
            self._attendance.update_score(
                record.attendance_id,
                arrival_time=arrival,
                percentage_score=breakdown.percentage_score,
            )
            result = self._recompute(owner.user_id, event)
            updated = self._require_attendance(record.attendance_id)

        logger.info(
            "attendance updated: id=%s user=%s score=%s by=%s",
            record.attendance_id,
            owner.user_id,
            breakdown.percentage_score,
            ctx.actual.user_id,
        )
        return ScoreResult(attendance=updated, breakdown=breakdown, summary=result)

    def delete_attendance(self, ctx: ActorContext, attendance_id: int) -> SummaryResult:
        record = self._require_attendance(attendance_id)
        owner = self._require_user(record.user_id)
        require_access(ctx, Operation.DELETE_ATTENDANCE, describe_user(owner), message="Not authorized to delete this attendance")

        session = self._require_session(record.session_id)
        event = self._require_event(session.event_id)

        with self._tx.atomic((owner.user_id, event.event_id)):
            self._summaries.lock(owner.user_id, event.event_id)
            self._attendance.delete(record.attendance_id)
            result = self._recompute(owner.user_id, event)

        logger.info("attendance deleted: id=%s user=%s by=%s", record.attendance_id, owner.user_id, ctx.actual.user_id)
        return result

    def rescore_session(self, session: Session) -> int:
        """Rescore every attendance row of a session after its times changed.

        Runs inside the caller's transaction; returns the number of rows rescored.
        """
        event = self._require_event(session.event_id)
        records = self._attendance.list_for_session(session.session_id)
        for record in records:
            with self._tx.atomic((record.user_id, event.event_id)):
                self._summaries.lock(record.user_id, event.event_id)
                breakdown = calculate_score(
                    record.arrival_time, session.start_time, session.end_time, factory=self._factory
                )
                self._attendance.update_score(
                    record.attendance_id,
                    arrival_time=record.arrival_time,
                    percentage_score=breakdown.percentage_score,
                )
                self._recompute(record.user_id, event)
        if records:
            logger.info("session %s rescored: %s attendance rows", session.session_id, len(records))
        return len(records)

    # ---- reads ----

    def get_attendance(self, ctx: ActorContext, attendance_id: int) -> AttendanceRecord:
        record = self._require_attendance(attendance_id)
        owner = self._require_user(record.user_id)
        require_access(ctx, Operation.VIEW_ATTENDANCE, describe_user(owner), message="Not authorized to view this attendance")
        return record

    def list_event_attendance(self, ctx: ActorContext, user_id: int, event_id: int) -> Sequence[SessionAttendance]:
        owner = self._require_user(user_id)
        require_access(ctx, Operation.VIEW_ATTENDANCE, describe_user(owner), message="Not authorized to view this attendance")
        event = self._require_event(event_id)
        return self._attendance.list_for_user_and_event(owner.user_id, event.event_id)

    def list_user_attendance(self, ctx: ActorContext, user_id: int) -> Sequence[SessionAttendance]:
        owner = self._require_user(user_id)
        require_access(ctx, Operation.VIEW_ATTENDANCE, describe_user(owner), message="Not authorized to view this attendance")
        return self._attendance.list_for_user(owner.user_id)

    # ---- summaries ----

    def _recompute(self, user_id: int, event: Event) -> SummaryResult:
        summary = self._summaries.get(user_id, event.event_id)
        skip = bool(summary and summary.skip)
        records = [] if skip else self._attendance.list_for_user_and_event(user_id, event.event_id)
        result = self._aggregator.aggregate(user_id=user_id, event=event, records=records, skip=skip)
        if not skip:
            self._summaries.upsert_cumulative(user_id=user_id, event_id=event.event_id, cumulative=result.cumulative)
        return result

    def recompute_summary(self, user_id: int, event_id: int) -> SummaryResult:
        event = self._require_event(event_id)
        with self._tx.atomic((int(user_id), event.event_id)):
            self._summaries.lock(int(user_id), event.event_id)
            result = self._recompute(int(user_id), event)
        logger.info("summary recomputed: user=%s event=%s cumulative=%s", user_id, event_id, result.cumulative)
        return result

    def get_summary(self, ctx: ActorContext, user_id: int, event_id: int) -> SummaryResult:
        owner = self._require_user(user_id)
        require_access(ctx, Operation.VIEW_ATTENDANCE, describe_user(owner), message="Not authorized to view this attendance")
        event = self._require_event(event_id)

        summary = self._summaries.get(owner.user_id, event.event_id)
        skip = bool(summary and summary.skip)
        records = [] if skip else self._attendance.list_for_user_and_event(owner.user_id, event.event_id)
        return self._aggregator.aggregate(user_id=owner.user_id, event=event, records=records, skip=skip)

    def list_user_summaries(self, ctx: ActorContext, user_id: int) -> Sequence[EventAttendanceSummary]:
        owner = self._require_user(user_id)
        require_access(ctx, Operation.VIEW_ATTENDANCE, describe_user(owner), message="Not authorized to view this attendance")
        return self._summaries.list_for_user(owner.user_id)

    def skip_user(self, ctx: ActorContext, event_id: int, user_id: int) -> SummaryResult:
        require_access(ctx, Operation.SKIP_USER, message="Only administrators can skip users")
        event = self._require_event(event_id)
        user = self._require_user(user_id)

        with self._tx.atomic((user.user_id, event.event_id)):
            self._summaries.lock(user.user_id, event.event_id)
            summary = self._summaries.get(user.user_id, event.event_id)
            if summary and summary.skip:
                raise ConflictError("User is already skipped for this event", code="ALREADY_SKIPPED")
            self._summaries.set_skip(
                user_id=user.user_id, event_id=event.event_id, skip=True, cumulative=SKIPPED_CUMULATIVE
            )
            result = self._recompute(user.user_id, event)

        logger.info("user skipped: user=%s event=%s by=%s", user.user_id, event.event_id, ctx.actual.user_id)
        return result

    def unskip_user(self, ctx: ActorContext, event_id: int, user_id: int) -> SummaryResult:
        require_access(ctx, Operation.SKIP_USER, message="Only administrators can skip users")
        event = self._require_event(event_id)
        user = self._require_user(user_id)

        with self._tx.atomic((user.user_id, event.event_id)):
            self._summaries.lock(user.user_id, event.event_id)
            self._summaries.set_skip(user_id=user.user_id, event_id=event.event_id, skip=False, cumulative=0.0)
            result = self._recompute(user.user_id, event)

        logger.info("user unskipped: user=%s event=%s by=%s", user.user_id, event.event_id, ctx.actual.user_id)
        return result

    # ---- submission window ----

    def is_window_open(self, session_id: int, now: Optional[datetime] = None) -> bool:
        session = self._require_session(session_id)
        return is_session_open(session.start_time, now, window_days=self._window_days)

    def minutes_remaining(self, session_id: int, now: Optional[datetime] = None) -> float:
        session = self._require_session(session_id)
        return minutes_remaining_to_submit(session.start_time, now, window_days=self._window_days)
