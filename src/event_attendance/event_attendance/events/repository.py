from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EventType
from .model import Event, NewEvent


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> Optional[Event]:
        raise NotImplementedError

    def list_events(
        self,
        *,
        visible_to_district: Optional[int] = None,
        district_id: Optional[int] = None,
        event_type: Optional[EventType] = None,
    ) -> Sequence[Event]:
        """``visible_to_district`` keeps that district's events plus multi-district ones."""
        raise NotImplementedError

    def create(self, data: NewEvent) -> int:
        raise NotImplementedError

    def update(self, event_id: int, **fields) -> bool:
        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError
