from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_datetime


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_datetime(value, field_name: str) -> datetime:
    """Accept a datetime or an ISO-8601 string; the result is naive UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid timestamp")


def require_window(start: datetime, end: datetime) -> None:
    if end <= start:
        raise ValidationError("End time must be after start time")


def require_percentage(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0 or number > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")
    return number


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {value!r}")


def require_bool(value, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def require_email(value, field_name: str = "Email") -> str:
    email = require_non_empty(value if isinstance(value, str) else "", field_name).lower()
    local, _, domain = email.partition("@")
    if not local or "." not in domain or " " in email:
        raise ValidationError(f"{field_name} is not a valid email address")
    return email
