"""Role x operation permission table.

Each operation maps every role to a scope predicate evaluated against a target
descriptor, and names which side of the ``ActorContext`` it binds to. Only
``check_access`` reads the table, so a new role or operation is one entry here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional

from ..core.enums import Operation, Role, VoicePart
from ..core.exceptions import ForbiddenError
from .context import Actor, ActorContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetDescriptor:
    """What the checked resource looks like, as far as permissions care.

    For attendance the owner is the attendee; for sessions/events ``creator_id``
    is the user who created them. ``district_id`` None means district-independent.
    ``role`` is set when the target is itself a user account.
    """

    owner_id: Optional[int] = None
    district_id: Optional[int] = None
    voice_part: Optional[VoicePart] = None
    creator_id: Optional[int] = None
    role: Optional[Role] = None


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    operation: Operation
    role: Role
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


class Binding(str, Enum):
    EFFECTIVE = "effective"
    ACTUAL = "actual"


Scope = Callable[[Actor, TargetDescriptor], bool]


def _any(actor: Actor, target: TargetDescriptor) -> bool:
    return True


def _none(actor: Actor, target: TargetDescriptor) -> bool:
    return False


def _own(actor: Actor, target: TargetDescriptor) -> bool:
    return target.owner_id is not None and target.owner_id == actor.user_id


def _same_district(actor: Actor, target: TargetDescriptor) -> bool:
    return actor.district_id is not None and target.district_id == actor.district_id


def _same_district_and_part(actor: Actor, target: TargetDescriptor) -> bool:
    return (
        _same_district(actor, target)
        and actor.voice_part is not None
        and target.voice_part == actor.voice_part
    )


def _visible_district(actor: Actor, target: TargetDescriptor) -> bool:
    return target.district_id is None or _same_district(actor, target)


def _creator_in_district(actor: Actor, target: TargetDescriptor) -> bool:
    return target.creator_id == actor.user_id and _same_district(actor, target)


def _same_district_non_admin(actor: Actor, target: TargetDescriptor) -> bool:
    return _same_district(actor, target) and target.role is not Role.ADMIN


def _either(*scopes: Scope) -> Scope:
    def scope(actor: Actor, target: TargetDescriptor) -> bool:
        return any(s(actor, target) for s in scopes)

    return scope


_own_or_district = _either(_own, _same_district)
_own_or_part = _either(_own, _same_district_and_part)

_ADMIN_ONLY = {
    Role.ADMIN: _any,
    Role.DISTRICT_LEADER: _none,
    Role.PART_LEADER: _none,
    Role.MEMBER: _none,
}

_ELEVATED_ATTENDANCE_EDIT = {
    Role.ADMIN: _any,
    Role.DISTRICT_LEADER: _own_or_district,
    Role.PART_LEADER: _own_or_part,
    Role.MEMBER: _none,
}

_CREATOR_MUTATION = {
    Role.ADMIN: _any,
    Role.DISTRICT_LEADER: _creator_in_district,
    Role.PART_LEADER: _none,
    Role.MEMBER: _none,
}

_DISTRICT_ACCOUNTS = {
    Role.ADMIN: _any,
    Role.DISTRICT_LEADER: _same_district_non_admin,
    Role.PART_LEADER: _none,
    Role.MEMBER: _none,
}

RULES: Dict[Operation, Mapping[Role, Scope]] = {
    Operation.VIEW_ATTENDANCE: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _own_or_district,
        Role.PART_LEADER: _own_or_part,
        Role.MEMBER: _own,
    },
    Operation.EDIT_ATTENDANCE: _ELEVATED_ATTENDANCE_EDIT,
    Operation.DELETE_ATTENDANCE: _ELEVATED_ATTENDANCE_EDIT,
    Operation.RECORD_ATTENDANCE_FOR: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _same_district,
        Role.PART_LEADER: _same_district_and_part,
        Role.MEMBER: _none,
    },
    Operation.VIEW_SESSION: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _same_district,
        Role.PART_LEADER: _same_district,
        Role.MEMBER: _same_district,
    },
    Operation.CREATE_SESSION: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _same_district,
        Role.PART_LEADER: _none,
        Role.MEMBER: _none,
    },
    Operation.EDIT_SESSION: _CREATOR_MUTATION,
    Operation.DELETE_SESSION: _CREATOR_MUTATION,
    Operation.VIEW_EVENT: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _visible_district,
        Role.PART_LEADER: _visible_district,
        Role.MEMBER: _visible_district,
    },
    Operation.CREATE_EVENT: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _same_district,
        Role.PART_LEADER: _none,
        Role.MEMBER: _none,
    },
    Operation.EDIT_EVENT: _CREATOR_MUTATION,
    Operation.DELETE_EVENT: _CREATOR_MUTATION,
    Operation.CHANGE_EVENT_SCOPE: _ADMIN_ONLY,
    Operation.VIEW_USER: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _own_or_district,
        Role.PART_LEADER: _own_or_district,
        Role.MEMBER: _own_or_district,
    },
    Operation.CREATE_USER: _DISTRICT_ACCOUNTS,
    Operation.DELETE_USER: _DISTRICT_ACCOUNTS,
    Operation.SKIP_USER: _ADMIN_ONLY,
    Operation.IMPERSONATE: _ADMIN_ONLY,
    Operation.BYPASS_SUBMISSION_WINDOW: {
        Role.ADMIN: _any,
        Role.DISTRICT_LEADER: _any,
        Role.PART_LEADER: _any,
        Role.MEMBER: _none,
    },
}

# Everything binds to the effective actor except what depends on the real
# person's privileges.
BINDINGS: Dict[Operation, Binding] = {
    Operation.IMPERSONATE: Binding.ACTUAL,
    Operation.BYPASS_SUBMISSION_WINDOW: Binding.ACTUAL,
}


def binding_for(operation: Operation) -> Binding:
    return BINDINGS.get(operation, Binding.EFFECTIVE)


def bound_actor(ctx: ActorContext, operation: Operation) -> Actor:
    if binding_for(operation) is Binding.ACTUAL:
        return ctx.actual
    return ctx.effective


def check_access(
    ctx: ActorContext,
    operation: Operation,
    target: Optional[TargetDescriptor] = None,
) -> AccessDecision:
    actor = bound_actor(ctx, operation)
    target = target or TargetDescriptor()

    scope = RULES[operation].get(actor.role, _none)
    if scope(actor, target):
        return AccessDecision(allowed=True, operation=operation, role=actor.role)
    return AccessDecision(
        allowed=False,
        operation=operation,
        role=actor.role,
        reason=f"{actor.role.value} may not perform {operation.value} on this resource",
    )


def require_access(
    ctx: ActorContext,
    operation: Operation,
    target: Optional[TargetDescriptor] = None,
    *,
    message: Optional[str] = None,
) -> AccessDecision:
    decision = check_access(ctx, operation, target)
    if not decision.allowed:
        logger.warning(
            "access denied: user=%s (as %s) op=%s target=%s",
            ctx.actual.user_id,
            ctx.effective.user_id,
            operation.value,
            target,
        )
        raise ForbiddenError(message or decision.reason)
    return decision


def resolve_actor_context(actual: Actor, impersonated: Optional[Actor] = None) -> ActorContext:
    """Build the context for a request, allowing only admins to act as someone else."""
    if impersonated is None or impersonated.user_id == actual.user_id:
        return ActorContext.for_actor(actual)

    ctx = ActorContext(actual=actual, effective=impersonated)
    require_access(ctx, Operation.IMPERSONATE, message="Only administrators can act on behalf of another user")
    return ctx


def is_unrestricted(ctx: ActorContext, operation: Operation) -> bool:
    """True when the bound actor's role has no scoping for ``operation`` (list filters use this)."""
    actor = bound_actor(ctx, operation)
    return RULES[operation].get(actor.role, _none) is _any
