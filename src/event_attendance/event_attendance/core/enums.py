from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles, most privileged first."""

    ADMIN = "ADMIN"
    DISTRICT_LEADER = "DISTRICT_LEADER"
    PART_LEADER = "PART_LEADER"
    MEMBER = "MEMBER"

    @property
    def is_privileged(self) -> bool:
        return self is not Role.MEMBER


class VoicePart(str, Enum):
    SOPRANO = "SOPRANO"
    ALTO = "ALTO"
    TENOR = "TENOR"
    BASS = "BASS"


class EventType(str, Enum):
    SINGLE_DISTRICT = "SINGLE_DISTRICT"
    MULTI_DISTRICT = "MULTI_DISTRICT"


class Operation(str, Enum):
    """Operations checked by the authorization matrix."""

    VIEW_ATTENDANCE = "VIEW_ATTENDANCE"
    EDIT_ATTENDANCE = "EDIT_ATTENDANCE"
    DELETE_ATTENDANCE = "DELETE_ATTENDANCE"
    RECORD_ATTENDANCE_FOR = "RECORD_ATTENDANCE_FOR"

    VIEW_SESSION = "VIEW_SESSION"
    CREATE_SESSION = "CREATE_SESSION"
    EDIT_SESSION = "EDIT_SESSION"
    DELETE_SESSION = "DELETE_SESSION"

    VIEW_EVENT = "VIEW_EVENT"
    CREATE_EVENT = "CREATE_EVENT"
    EDIT_EVENT = "EDIT_EVENT"
    DELETE_EVENT = "DELETE_EVENT"
    CHANGE_EVENT_SCOPE = "CHANGE_EVENT_SCOPE"

    VIEW_USER = "VIEW_USER"
    CREATE_USER = "CREATE_USER"
    DELETE_USER = "DELETE_USER"

    SKIP_USER = "SKIP_USER"
    IMPERSONATE = "IMPERSONATE"
    BYPASS_SUBMISSION_WINDOW = "BYPASS_SUBMISSION_WINDOW"
