from __future__ import annotations

from typing import Iterable

from ..core.constants import DEFAULT_MINIMUM_MINUTES_PER_WEEK
from .model import WeeklyRecord


def minutes_attended(record: WeeklyRecord) -> float:
    """Minutes credited for one session: score share of its duration."""
    return (record.attendance_percentage / 100) * record.session_duration_minutes


def calculate_weekly_minutes(records: Iterable[WeeklyRecord]) -> float:
    return sum(minutes_attended(r) for r in records)


def meets_weekly_requirement(
    weekly_minutes: float,
    minimum_minutes_required: int = DEFAULT_MINIMUM_MINUTES_PER_WEEK,
) -> bool:
    return weekly_minutes >= minimum_minutes_required
