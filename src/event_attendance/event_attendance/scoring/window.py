"""Submission windows.

Members may record attendance from the moment a session starts until
``SUBMISSION_WINDOW_DAYS`` later (both ends inclusive). Privileged roles are
instead bounded by the event's own start/end dates; both checks live here side
by side and callers pick one by the acting user's role.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import minutes_between, now_utc
from ..core.constants import SUBMISSION_WINDOW_DAYS, WINDOW_CLOSED

EVENT_OPEN = "OPEN"
EVENT_NOT_STARTED = "NOT_STARTED"
EVENT_ENDED = "ENDED"


def closing_time(session_start: datetime, *, window_days: int = SUBMISSION_WINDOW_DAYS) -> datetime:
    return session_start + timedelta(days=window_days)


def is_session_open(
    session_start: datetime,
    now: Optional[datetime] = None,
    *,
    window_days: int = SUBMISSION_WINDOW_DAYS,
) -> bool:
    now = now or now_utc()
    return session_start <= now <= closing_time(session_start, window_days=window_days)


def minutes_remaining_to_submit(
    session_start: datetime,
    now: Optional[datetime] = None,
    *,
    window_days: int = SUBMISSION_WINDOW_DAYS,
) -> float:
    """Minutes until the window opens, minutes until it closes, or ``WINDOW_CLOSED``."""
    now = now or now_utc()
    if now < session_start:
        return minutes_between(now, session_start)

    closes = closing_time(session_start, window_days=window_days)
    if now > closes:
        return WINDOW_CLOSED
    return math.ceil(minutes_between(now, closes))


def format_time_remaining(minutes: float) -> str:
    if minutes < 0:
        return "Closed"
    if minutes == 0:
        return "Closing now"

    days = int(minutes // (60 * 24))
    hours = int((minutes % (60 * 24)) // 60)
    mins = int(minutes % 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0 and len(parts) < 2:
        parts.append(f"{mins}m")
    return " ".join(parts)


def event_range_status(start_date: datetime, end_date: Optional[datetime], now: Optional[datetime] = None) -> str:
    now = now or now_utc()
    if now < start_date:
        return EVENT_NOT_STARTED
    if end_date is not None and now > end_date:
        return EVENT_ENDED
    return EVENT_OPEN
