from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, VoicePart
from ..users.model import User


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role
    district_id: Optional[int]
    voice_part: Optional[VoicePart] = None

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            user_id=user.user_id,
            role=user.role,
            district_id=user.district_id,
            voice_part=user.voice_part,
        )


@dataclass(frozen=True)
class ActorContext:
    """Who is really acting (``actual``) and whose identity is being used (``effective``).

    Without impersonation both are the same actor.
    """

    actual: Actor
    effective: Actor

    @classmethod
    def for_actor(cls, actor: Actor) -> "ActorContext":
        return cls(actual=actor, effective=actor)

    @property
    def is_impersonating(self) -> bool:
        return self.actual.user_id != self.effective.user_id
