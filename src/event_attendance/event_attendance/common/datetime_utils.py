from __future__ import annotations

from datetime import datetime, timedelta, timezone


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    Offsets are normalized to UTC, so "2026-02-01T08:00:00+02:00" becomes 06:00.
    A trailing "Z" is accepted.
    """
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    parsed = datetime.fromisoformat(v)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_utc() -> datetime:
    """Current time as naive UTC.

    Note: Wrapped so tests can patch/mock it easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def minutes_between(start: datetime, end: datetime) -> float:
    """Signed minutes from start to end (fractional)."""
    return (end - start) / timedelta(minutes=1)
