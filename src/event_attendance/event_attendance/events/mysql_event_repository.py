from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event, NewEvent
from .repository import EventRepository

_COLUMNS = """
    event_id, title, slug, description, event_type, start_date, end_date, district_id,
    creator_id, pass_mark, weekly_constraint, minimum_minutes_per_week
"""

_UPDATABLE = {
    "title",
    "slug",
    "description",
    "event_type",
    "start_date",
    "end_date",
    "district_id",
    "pass_mark",
    "weekly_constraint",
    "minimum_minutes_per_week",
}


def _to_event(row: dict) -> Event:
    return Event(
        event_id=int(row["event_id"]),
        title=row["title"],
        slug=row["slug"],
        description=row.get("description"),
        event_type=EventType(row["event_type"]),
        start_date=row["start_date"],
        end_date=row.get("end_date"),
        district_id=row.get("district_id"),
        creator_id=row.get("creator_id"),
        pass_mark=int(row["pass_mark"]),
        weekly_constraint=bool(row["weekly_constraint"]),
        minimum_minutes_per_week=int(row["minimum_minutes_per_week"]),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (event_id,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def get_by_slug(self, slug: str) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE slug=%s", (slug,))
            row = fetchone(cur)
            return _to_event(row) if row else None

    def list_events(
        self,
        *,
        visible_to_district: Optional[int] = None,
        district_id: Optional[int] = None,
        event_type: Optional[EventType] = None,
    ) -> Sequence[Event]:
        clauses = ["1=1"]
        params: list[object] = []

        if visible_to_district is not None:
            clauses.append("(district_id=%s OR district_id IS NULL)")
            params.append(int(visible_to_district))
        elif district_id is not None:
            clauses.append("district_id=%s")
            params.append(int(district_id))
        if event_type is not None:
            clauses.append("event_type=%s")
            params.append(event_type.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM events WHERE {where} ORDER BY start_date DESC",
                tuple(params),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def create(self, data: NewEvent) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(
                    title, slug, description, event_type, start_date, end_date, district_id,
                    creator_id, pass_mark, weekly_constraint, minimum_minutes_per_week
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    data.title,
                    data.slug,
                    data.description,
                    data.event_type.value,
                    data.start_date,
                    data.end_date,
                    data.district_id,
                    data.creator_id,
                    data.pass_mark,
                    int(data.weekly_constraint),
                    data.minimum_minutes_per_week,
                ),
            )
            return int(cur.lastrowid)

    def update(self, event_id: int, **fields) -> bool:
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Unsupported event fields: {sorted(unknown)}")
        if not fields:
            return False

        assignments = []
        params: list[object] = []
        for name, value in fields.items():
            if isinstance(value, EventType):
                value = value.value
            elif isinstance(value, bool):
                value = int(value)
            assignments.append(f"{name}=%s")
            params.append(value)
        params.append(int(event_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE events SET {', '.join(assignments)} WHERE event_id=%s", tuple(params))
            return cur.rowcount > 0

    def delete(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
