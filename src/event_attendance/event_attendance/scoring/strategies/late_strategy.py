from __future__ import annotations

import math

from ...core.constants import DEDUCTION_STEP_MINUTES, DEDUCTION_STEP_PERCENTAGE
from ..model import ScoreBreakdown
from .base import ScoringStrategy


class LateStrategy(ScoringStrategy):
    """Stepped penalty: every started 5-minute bucket of lateness costs 5 points."""

    def __init__(
        self,
        *,
        step_minutes: int = DEDUCTION_STEP_MINUTES,
        step_percentage: int = DEDUCTION_STEP_PERCENTAGE,
    ):
        self._step_minutes = int(step_minutes)
        self._step_percentage = int(step_percentage)

    def deduction_for(self, minutes_late: float) -> int:
        return math.ceil(minutes_late / self._step_minutes) * self._step_percentage

    def score(self, *, minutes_late: float, max_percentage: int) -> ScoreBreakdown:
        deduction = self.deduction_for(minutes_late)
        percentage = max(0, max_percentage - deduction)
        return ScoreBreakdown(
            percentage_score=round(float(percentage), 2),
            minutes_late=round(minutes_late, 2),
            max_percentage=max_percentage,
            is_on_time=False,
            deduction_percentage=deduction,
        )
