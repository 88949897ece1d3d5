from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Session
from .repository import SessionRepository

_SELECT = """
    SELECT s.session_id, s.event_id, s.district_id, s.start_time, s.end_time,
           s.duration_minutes, s.created_by_id,
           (SELECT COUNT(*) FROM attendances a WHERE a.session_id = s.session_id) AS attendance_count
    FROM sessions s
"""


def _to_session(row: dict) -> Session:
    return Session(
        session_id=int(row["session_id"]),
        event_id=int(row["event_id"]),
        district_id=int(row["district_id"]),
        start_time=row["start_time"],
        end_time=row["end_time"],
        duration_minutes=int(row["duration_minutes"]),
        created_by_id=row.get("created_by_id"),
        attendance_count=int(row.get("attendance_count") or 0),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.session_id=%s", (session_id,))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_sessions(
        self,
        *,
        event_id: Optional[int] = None,
        district_id: Optional[int] = None,
    ) -> Sequence[Session]:
        clauses = ["1=1"]
        params: list[object] = []
        if event_id is not None:
            clauses.append("s.event_id=%s")
            params.append(int(event_id))
        if district_id is not None:
            clauses.append("s.district_id=%s")
            params.append(int(district_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY s.start_time ASC", tuple(params))
            return [_to_session(r) for r in fetchall(cur)]

    def total_duration_for_event(self, event_id: int, *, exclude_session_id: Optional[int] = None) -> int:
        sql = "SELECT COALESCE(SUM(duration_minutes), 0) AS total FROM sessions WHERE event_id=%s"
        params: list[object] = [int(event_id)]
        if exclude_session_id is not None:
            sql += " AND session_id<>%s"
            params.append(int(exclude_session_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            row = fetchone(cur)
            return int(row["total"]) if row else 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(event_id, district_id, start_time, end_time, duration_minutes, created_by_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (event_id, district_id, start_time, end_time, duration_minutes, created_by_id),
            )
            return int(cur.lastrowid)

    def update_times(
        self,
        session_id: int,
        *,
        start_time: datetime,
        end_time: datetime,
        duration_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET start_time=%s, end_time=%s, duration_minutes=%s
                WHERE session_id=%s
                """,
                (start_time, end_time, duration_minutes, int(session_id)),
            )
            return cur.rowcount > 0

    def delete(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0
