from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, EventAttendanceSummary, SessionAttendance
from .repository import AttendanceRepository, SummaryRepository

_RECORD_COLUMNS = "attendance_id, user_id, session_id, arrival_time, percentage_score, created_by_id, created_at"

_JOINED = """
    SELECT a.attendance_id, a.user_id, a.session_id, s.event_id, a.arrival_time, a.percentage_score,
           s.start_time, s.end_time, s.duration_minutes, s.district_id
    FROM attendances a
    JOIN sessions s ON s.session_id = a.session_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        session_id=int(r["session_id"]),
        arrival_time=r["arrival_time"],
        percentage_score=float(r["percentage_score"]),
        created_by_id=r.get("created_by_id"),
        created_at=r.get("created_at"),
    )


def _to_joined(r: dict) -> SessionAttendance:
    return SessionAttendance(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        session_id=int(r["session_id"]),
        event_id=int(r["event_id"]),
        arrival_time=r["arrival_time"],
        percentage_score=float(r["percentage_score"]),
        session_start=r["start_time"],
        session_end=r["end_time"],
        session_duration_minutes=int(r["duration_minutes"]),
        session_district_id=int(r["district_id"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendances WHERE attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_session(self, user_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendances WHERE user_id=%s AND session_id=%s",
                (user_id, session_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_user_and_event(self, user_id: int, event_id: int) -> Sequence[SessionAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _JOINED + " WHERE a.user_id=%s AND s.event_id=%s ORDER BY s.start_time ASC",
                (user_id, event_id),
            )
            return [_to_joined(r) for r in fetchall(cur)]

    def list_for_user(self, user_id: int) -> Sequence[SessionAttendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_JOINED + " WHERE a.user_id=%s ORDER BY a.created_at DESC", (user_id,))
            return [_to_joined(r) for r in fetchall(cur)]

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM attendances WHERE session_id=%s", (session_id,))
            return [_to_record(r) for r in fetchall(cur)]

    def count_for_session(self, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM attendances WHERE session_id=%s", (session_id,))
            return int(fetchone(cur)["n"])

    def count_for_event(self, event_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM attendances a
                JOIN sessions s ON s.session_id = a.session_id
                WHERE s.event_id=%s
                """,
                (event_id,),
            )
            return int(fetchone(cur)["n"])

    def create(
        self,
        *,
        user_id: int,
        session_id: int,
        arrival_time: datetime,
        percentage_score: float,
        created_by_id: int,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(user_id, session_id, arrival_time, percentage_score, created_by_id)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (user_id, session_id, arrival_time, percentage_score, created_by_id),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError(
                    "Already submitted attendance for this session", code="ATTENDANCE_EXISTS"
                ) from exc
            raise

    def update_score(self, attendance_id: int, *, arrival_time: datetime, percentage_score: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendances
                SET arrival_time=%s, percentage_score=%s
                WHERE attendance_id=%s
                """,
                (arrival_time, percentage_score, int(attendance_id)),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0


def _to_summary(r: dict) -> EventAttendanceSummary:
    return EventAttendanceSummary(
        summary_id=int(r["summary_id"]),
        user_id=int(r["user_id"]),
        event_id=int(r["event_id"]),
        cumulative=float(r["cumulative"]),
        skip=bool(r["skip"]),
    )


class MySQLSummaryRepository(SummaryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, user_id: int, event_id: int) -> Optional[EventAttendanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT summary_id, user_id, event_id, cumulative, skip
                FROM event_attendance_summaries
                WHERE event_id=%s AND user_id=%s
                """,
                (event_id, user_id),
            )
            r = fetchone(cur)
            return _to_summary(r) if r else None

    def lock(self, user_id: int, event_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_attendance_summaries(event_id, user_id, cumulative, skip)
                VALUES(%s,%s,0,0)
                ON DUPLICATE KEY UPDATE summary_id=summary_id
                """,
                (event_id, user_id),
            )
            cur.execute(
                "SELECT summary_id FROM event_attendance_summaries WHERE event_id=%s AND user_id=%s FOR UPDATE",
                (event_id, user_id),
            )
            fetchall(cur)

    def upsert_cumulative(self, *, user_id: int, event_id: int, cumulative: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_attendance_summaries(event_id, user_id, cumulative, skip)
                VALUES(%s,%s,%s,0)
                ON DUPLICATE KEY UPDATE cumulative=VALUES(cumulative)
                """,
                (event_id, user_id, cumulative),
            )

    def set_skip(self, *, user_id: int, event_id: int, skip: bool, cumulative: float) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_attendance_summaries(event_id, user_id, cumulative, skip)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE cumulative=VALUES(cumulative), skip=VALUES(skip)
                """,
                (event_id, user_id, cumulative, int(skip)),
            )

    def list_for_user(self, user_id: int) -> Sequence[EventAttendanceSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT summary_id, user_id, event_id, cumulative, skip
                FROM event_attendance_summaries
                WHERE user_id=%s
                ORDER BY updated_at DESC
                """,
                (user_id,),
            )
            return [_to_summary(r) for r in fetchall(cur)]
