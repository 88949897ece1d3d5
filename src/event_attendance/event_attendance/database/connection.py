from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import mysql.connector

DEFAULT_DATABASE = "event_attendance"


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str

    @classmethod
    def from_settings(cls, db_config: dict) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` mapping, filling local defaults."""
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", DEFAULT_DATABASE)),
        )


class DatabaseConnection:
    """Process-wide connection factory.

    Outside a transaction each repository call opens a short-lived connection.
    Inside ``transaction()`` every call on the same thread shares one connection,
    committed or rolled back as a unit.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._local = threading.local()

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
        )
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)

    def active(self):
        return getattr(self._local, "conn", None)

    @contextmanager
    def transaction(self) -> Iterator[object]:
        existing = self.active()
        if existing is not None:
            yield existing
            return

        conn = self.connect()
        # READ COMMITTED: reads after a row lock see rows other writers just committed.
        conn.start_transaction(isolation_level="READ COMMITTED")
        self._local.conn = conn
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            conn.close()
