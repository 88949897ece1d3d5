from __future__ import annotations

from dataclasses import dataclass

from .strategies.base import ScoringStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class ScoringStrategyFactory:
    """Factory Pattern: choose the scoring strategy for an arrival."""

    def for_arrival(self, *, minutes_late: float) -> ScoringStrategy:
        if minutes_late <= 0:
            return OnTimeStrategy()
        return LateStrategy()
