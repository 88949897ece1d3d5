from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..access.context import ActorContext
from ..access.matrix import TargetDescriptor, is_unrestricted, require_access
from ..common.validators import optional_int, require_email, require_non_empty
from ..core.enums import Operation, Role, VoicePart
from ..core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from .model import NewUser, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def describe_user(user: User) -> TargetDescriptor:
    return TargetDescriptor(
        owner_id=user.user_id,
        district_id=user.district_id,
        voice_part=user.voice_part,
        role=user.role,
    )


def parse_role(value) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}")


def parse_voice_part(value) -> VoicePart:
    try:
        return VoicePart(value)
    except ValueError:
        raise ValidationError(f"Unknown voice part: {value!r}")


class UserService:
    """Use case: district-scoped user management."""

    def __init__(self, users: UserRepository):
        self._users = users

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(
        self,
        ctx: ActorContext,
        *,
        district_id: Optional[int] = None,
        role: Optional[Role] = None,
        voice_part: Optional[VoicePart] = None,
    ) -> Sequence[User]:
        if not is_unrestricted(ctx, Operation.VIEW_USER):
            own = ctx.effective.district_id
            if district_id is not None and district_id != own:
                raise ForbiddenError("Can only filter by your own district")
            if own is None:
                return []
            district_id = own
        return self._users.list_users(district_id=district_id, role=role, voice_part=voice_part)

    def get_user(self, ctx: ActorContext, user_id: int) -> User:
        user = self._require_user(user_id)
        require_access(ctx, Operation.VIEW_USER, describe_user(user), message="You don't have access to this user")
        return user

    def create_user(
        self,
        ctx: ActorContext,
        *,
        full_name: str,
        email: str,
        district_id,
        role=None,
        voice_part=None,
    ) -> User:
        full_name = require_non_empty(full_name, "Full name")
        email = require_email(email)
        kind = parse_role(role) if role else Role.MEMBER
        part = parse_voice_part(voice_part) if voice_part else None
        district = optional_int(district_id)

        require_access(
            ctx,
            Operation.CREATE_USER,
            TargetDescriptor(district_id=district, role=kind),
            message="Can only create non-admin users in your district",
        )

        if self._users.get_by_email(email):
            raise ConflictError("User with this email already exists", code="USER_EXISTS")

        user_id = self._users.create(
            NewUser(full_name=full_name, email=email, role=kind, district_id=district, voice_part=part)
        )
        logger.info("user created: id=%s role=%s district=%s by=%s", user_id, kind.value, district, ctx.actual.user_id)
        return self._require_user(user_id)

    def delete_user(self, ctx: ActorContext, user_id: int) -> None:
        user = self._require_user(user_id)
        require_access(
            ctx,
            Operation.DELETE_USER,
            describe_user(user),
            message="You can only delete non-admin users in your district",
        )

        if not self._users.delete(user.user_id):
            raise NotFoundError("User not found")
        logger.info("user deleted: id=%s by=%s", user.user_id, ctx.actual.user_id)
