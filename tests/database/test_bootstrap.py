from pathlib import Path

from src.event_attendance.event_attendance.database.bootstrap import schema_statements
from src.event_attendance.event_attendance.database.connection import DBConfig

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_statements_drop_comments_and_database_switches():
    sql = """
    -- header
    CREATE DATABASE IF NOT EXISTS other;
    USE other;
    CREATE TABLE a (id INT); -- trailing
    CREATE TABLE b (id INT);
    """

    assert list(schema_statements(sql)) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]


def test_project_schema_declares_every_table_and_unique_keys():
    statements = list(schema_statements(SCHEMA.read_text(encoding="utf-8")))
    text = "\n".join(statements)

    for table in ("districts", "users", "events", "sessions", "attendances", "event_attendance_summaries"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in text
    assert "uq_attendance_user_session" in text
    assert "uq_summary_event_user" in text


def test_db_config_fills_defaults():
    config = DBConfig.from_settings({"host": "db", "user": "app", "password": "pw"})

    assert config.port == 3306
    assert config.database == "event_attendance"
