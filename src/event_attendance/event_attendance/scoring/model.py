from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreBreakdown:
    """Result of scoring one arrival against one session window."""

    percentage_score: float
    minutes_late: float
    max_percentage: int
    is_on_time: bool
    deduction_percentage: int

    @property
    def is_late(self) -> bool:
        return not self.is_on_time

    def as_dict(self) -> dict:
        return {
            "percentageScore": self.percentage_score,
            "minutesLate": self.minutes_late,
            "maxPercentage": self.max_percentage,
            "isOnTime": self.is_on_time,
            "deductionPercentage": self.deduction_percentage,
        }


@dataclass(frozen=True)
class WeeklyRecord:
    session_duration_minutes: float
    attendance_percentage: float
