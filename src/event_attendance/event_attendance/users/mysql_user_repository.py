from __future__ import annotations

from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import Role, VoicePart
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewUser, User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, email, role, district_id, voice_part, is_active"


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        email=row["email"],
        role=Role(row["role"]),
        district_id=row.get("district_id"),
        voice_part=VoicePart(row["voice_part"]) if row.get("voice_part") else None,
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(
        self,
        *,
        district_id: Optional[int] = None,
        role: Optional[Role] = None,
        voice_part: Optional[VoicePart] = None,
    ) -> Sequence[User]:
        where, params = [], []
        if district_id is not None:
            where.append("district_id=%s")
            params.append(district_id)
        if role is not None:
            where.append("role=%s")
            params.append(role.value)
        if voice_part is not None:
            where.append("voice_part=%s")
            params.append(voice_part.value)

        sql = f"SELECT {_COLUMNS} FROM users"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY full_name"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def create(self, data: NewUser) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(full_name, email, role, district_id, voice_part, is_active)
                    VALUES(%s,%s,%s,%s,%s,1)
                    """,
                    (
                        data.full_name,
                        data.email,
                        data.role.value,
                        data.district_id,
                        data.voice_part.value if data.voice_part else None,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError("User with this email already exists", code="USER_EXISTS") from exc
            raise

    def delete(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0
