from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..core.constants import SKIPPED_CUMULATIVE
from ..events.model import Event
from ..scoring.model import WeeklyRecord
from ..scoring.weekly import calculate_weekly_minutes, meets_weekly_requirement
from .model import SessionAttendance, SummaryResult


def average_percentage(scores: Sequence[float]) -> float:
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 2)


@dataclass
class CumulativeAggregator:
    """Roll one user's session scores for one event into a standing.

    ``cumulative`` is always the plain mean of the session scores. For events with
    a weekly constraint the minutes check is reported next to it and never folded
    into it.
    """

    def aggregate(
        self,
        *,
        user_id: int,
        event: Event,
        records: Sequence[SessionAttendance],
        skip: bool = False,
    ) -> SummaryResult:
        if skip:
            return SummaryResult(
                user_id=user_id,
                event_id=event.event_id,
                cumulative=SKIPPED_CUMULATIVE,
                skip=True,
                sessions_attended=0,
                weekly_minutes=0.0,
                meets_weekly_requirement=True if event.weekly_constraint else None,
                meets_pass_mark=True,
            )

        cumulative = average_percentage([r.percentage_score for r in records])
        weekly_minutes = calculate_weekly_minutes(
            WeeklyRecord(
                session_duration_minutes=r.session_duration_minutes,
                attendance_percentage=r.percentage_score,
            )
            for r in records
        )

        meets_weekly = None
        if event.weekly_constraint:
            meets_weekly = meets_weekly_requirement(weekly_minutes, event.minimum_minutes_per_week)

        return SummaryResult(
            user_id=user_id,
            event_id=event.event_id,
            cumulative=cumulative,
            skip=False,
            sessions_attended=len(records),
            weekly_minutes=round(weekly_minutes, 2),
            meets_weekly_requirement=meets_weekly,
            meets_pass_mark=cumulative >= event.pass_mark,
        )
