from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..scoring.model import ScoreBreakdown


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's arrival and score for one session."""

    attendance_id: int
    user_id: int
    session_id: int
    arrival_time: datetime
    percentage_score: float
    created_by_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionAttendance:
    """Read-model: an attendance row joined with its session window."""

    attendance_id: int
    user_id: int
    session_id: int
    event_id: int
    arrival_time: datetime
    percentage_score: float
    session_start: datetime
    session_end: datetime
    session_duration_minutes: int
    session_district_id: int


@dataclass(frozen=True)
class EventAttendanceSummary:
    """Cached standing of one user in one event; derived from attendance rows."""

    summary_id: int
    user_id: int
    event_id: int
    cumulative: float
    skip: bool = False


@dataclass(frozen=True)
class SummaryResult:
    user_id: int
    event_id: int
    cumulative: float
    skip: bool
    sessions_attended: int
    weekly_minutes: float
    meets_weekly_requirement: Optional[bool]
    meets_pass_mark: bool

    def as_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "eventId": self.event_id,
            "cumulative": self.cumulative,
            "skip": self.skip,
            "sessionsAttended": self.sessions_attended,
            "weeklyMinutes": self.weekly_minutes,
            "meetsWeeklyRequirement": self.meets_weekly_requirement,
            "meetsPassMark": self.meets_pass_mark,
        }


@dataclass(frozen=True)
class ScoreResult:
    attendance: AttendanceRecord
    breakdown: ScoreBreakdown
    summary: SummaryResult

    @property
    def message(self) -> str:
        return f"Attendance recorded at {self.breakdown.percentage_score:g}%"
