from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_sessions(
        self,
        *,
        event_id: Optional[int] = None,
        district_id: Optional[int] = None,
    ) -> Sequence[Session]:
        raise NotImplementedError

    def total_duration_for_event(self, event_id: int, *, exclude_session_id: Optional[int] = None) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        event_id: int,
        district_id: int,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
        created_by_id: int,
    ) -> int:
        raise NotImplementedError

    def update_times(
        self,
        session_id: int,
        *,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> bool:
        raise NotImplementedError

    def delete(self, session_id: int) -> bool:
        raise NotImplementedError
