from src.event_attendance.event_attendance.scoring.model import WeeklyRecord
from src.event_attendance.event_attendance.scoring.weekly import (
    calculate_weekly_minutes,
    meets_weekly_requirement,
    minutes_attended,
)


def test_minutes_attended_scales_duration_by_score():
    assert minutes_attended(WeeklyRecord(session_duration_minutes=120, attendance_percentage=50)) == 60


def test_weekly_minutes_sum_over_sessions():
    records = [
        WeeklyRecord(session_duration_minutes=120, attendance_percentage=100),
        WeeklyRecord(session_duration_minutes=240, attendance_percentage=200),
    ]
    assert calculate_weekly_minutes(records) == 600


def test_weekly_minutes_of_nothing_is_zero():
    assert calculate_weekly_minutes([]) == 0


def test_meets_weekly_requirement_uses_default_minimum():
    assert meets_weekly_requirement(240)
    assert not meets_weekly_requirement(239.5)
    assert meets_weekly_requirement(90, 90)
