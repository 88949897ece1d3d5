from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role, VoicePart
from .model import NewUser, User


class UserRepository(Protocol):
    """Storage contract for users; services depend on this, not on a concrete DB."""

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(
        self,
        *,
        district_id: Optional[int] = None,
        role: Optional[Role] = None,
        voice_part: Optional[VoicePart] = None,
    ) -> Sequence[User]:
        raise NotImplementedError

    def create(self, data: NewUser) -> int:
        """Insert a user; raises ``ConflictError`` when the email is taken."""
        raise NotImplementedError

    def delete(self, user_id: int) -> bool:
        raise NotImplementedError
