"""Attendance percentage for one arrival.

Base is 100% per standard 2-hour block. Longer sessions count as several blocks
(a 4-hour session is worth up to 200%). Lateness is deducted in 5-point steps,
one step per started 5 minutes, and the score never drops below zero.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..core.constants import BLOCK_PERCENTAGE, STANDARD_BLOCK_MINUTES
from .factory import ScoringStrategyFactory
from .model import ScoreBreakdown


def max_percentage_for_duration(duration_minutes: float) -> int:
    blocks = math.ceil(duration_minutes / STANDARD_BLOCK_MINUTES)
    return BLOCK_PERCENTAGE * blocks


def calculate_score(
    arrival_time: datetime,
    session_start: datetime,
    session_end: datetime,
    *,
    factory: Optional[ScoringStrategyFactory] = None,
) -> ScoreBreakdown:
    """Score an arrival. Callers must reject ``session_end <= session_start`` first."""
    factory = factory or ScoringStrategyFactory()

    duration = minutes_between(session_start, session_end)
    max_percentage = max_percentage_for_duration(duration)
    minutes_late = minutes_between(session_start, arrival_time)

    strategy = factory.for_arrival(minutes_late=minutes_late)
    return strategy.score(minutes_late=minutes_late, max_percentage=max_percentage)
