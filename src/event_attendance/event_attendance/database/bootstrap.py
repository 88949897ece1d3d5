"""Create the database and apply ``database/schema.sql``.

The schema only uses ``CREATE ... IF NOT EXISTS``, so applying it on every
start is safe.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)

_LINE_COMMENT = re.compile(r"--[^\n]*")
# The target database comes from settings, not from the file.
_IGNORED = re.compile(r"^(CREATE\s+DATABASE|USE)\b", re.IGNORECASE)


def schema_statements(sql: str) -> Iterator[str]:
    """Split a DDL script into statements.

    DDL here never has ';' inside string literals, so a plain split is enough.
    """
    for chunk in _LINE_COMMENT.sub("", sql).split(";"):
        stmt = chunk.strip()
        if stmt and not _IGNORED.match(stmt):
            yield stmt


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    config = DBConfig.from_settings(db_config)
    ensure_database_exists(config)

    statements = list(schema_statements(Path(schema_path).read_text(encoding="utf-8")))
    conn = DatabaseConnection(config).connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied: %s statements on %s", len(statements), config.database)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_settings(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
