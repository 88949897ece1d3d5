from __future__ import annotations

from ..model import ScoreBreakdown
from .base import ScoringStrategy


class OnTimeStrategy(ScoringStrategy):
    """Arrived at or before the start: full marks for the session."""

    def score(self, *, minutes_late: float, max_percentage: int) -> ScoreBreakdown:
        return ScoreBreakdown(
            percentage_score=float(max_percentage),
            minutes_late=0.0,
            max_percentage=max_percentage,
            is_on_time=True,
            deduction_percentage=0,
        )
