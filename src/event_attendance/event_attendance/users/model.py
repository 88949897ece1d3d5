from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, VoicePart


@dataclass(frozen=True)
class User:
    """Domain entity: a choir member or leader.

    Plain data object (no DB access code).
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    district_id: Optional[int]
    voice_part: Optional[VoicePart] = None
    is_active: bool = True


@dataclass(frozen=True)
class NewUser:
    full_name: str
    email: str
    role: Role
    district_id: Optional[int]
    voice_part: Optional[VoicePart] = None
