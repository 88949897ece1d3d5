from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, EventAttendanceSummary, SessionAttendance


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_session(self, user_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_user_and_event(self, user_id: int, event_id: int) -> Sequence[SessionAttendance]:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[SessionAttendance]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_for_session(self, session_id: int) -> int:
        raise NotImplementedError

    def count_for_event(self, event_id: int) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        user_id: int,
        session_id: int,
        arrival_time: datetime,
        percentage_score: float,
        created_by_id: int,
    ) -> int:
        """Insert one row. Raises ConflictError when (user_id, session_id) already exists."""
        raise NotImplementedError

    def update_score(self, attendance_id: int, *, arrival_time: datetime, percentage_score: float) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: int) -> bool:
        raise NotImplementedError


class SummaryRepository(Protocol):
    def get(self, user_id: int, event_id: int) -> Optional[EventAttendanceSummary]:
        raise NotImplementedError

    def lock(self, user_id: int, event_id: int) -> None:
        """Materialize the (user, event) row if missing and hold it until the transaction ends."""
        raise NotImplementedError

    def upsert_cumulative(self, *, user_id: int, event_id: int, cumulative: float) -> None:
        """Write ``cumulative`` keyed by (event_id, user_id); ``skip`` is left as is."""
        raise NotImplementedError

    def set_skip(self, *, user_id: int, event_id: int, skip: bool, cumulative: float) -> None:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[EventAttendanceSummary]:
        raise NotImplementedError
