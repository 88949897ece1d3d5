from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import ScoreBreakdown


class ScoringStrategy(ABC):
    """Strategy Pattern: encapsulate how an arrival turns into a percentage."""

    @abstractmethod
    def score(self, *, minutes_late: float, max_percentage: int) -> ScoreBreakdown:
        raise NotImplementedError
