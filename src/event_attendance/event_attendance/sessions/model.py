from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Domain entity: one scheduled time block of an event, scoped to one district."""

    session_id: int
    event_id: int
    district_id: int
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    created_by_id: Optional[int] = None
    attendance_count: int = 0
