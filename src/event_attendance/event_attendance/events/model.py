from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.constants import DEFAULT_MINIMUM_MINUTES_PER_WEEK, DEFAULT_PASS_MARK
from ..core.enums import EventType


@dataclass(frozen=True)
class Event:
    """Domain entity: a group of sessions with a pass mark and optional weekly constraint.

    ``district_id`` is None for multi-district events, which every district can see.
    """

    event_id: int
    title: str
    slug: str
    event_type: EventType
    start_date: datetime
    end_date: Optional[datetime]
    district_id: Optional[int]
    creator_id: Optional[int]
    pass_mark: int = DEFAULT_PASS_MARK
    weekly_constraint: bool = False
    minimum_minutes_per_week: int = DEFAULT_MINIMUM_MINUTES_PER_WEEK
    description: Optional[str] = None

    @property
    def is_multi_district(self) -> bool:
        return self.district_id is None


@dataclass(frozen=True)
class NewEvent:
    title: str
    slug: str
    event_type: EventType
    start_date: datetime
    end_date: Optional[datetime]
    district_id: Optional[int]
    creator_id: int
    pass_mark: int
    weekly_constraint: bool
    minimum_minutes_per_week: int
    description: Optional[str] = None
