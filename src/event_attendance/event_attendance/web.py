"""Helpers shared by the JSON controllers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from .access.context import Actor, ActorContext
from .access.matrix import resolve_actor_context
from .container import Container
from .core.exceptions import AuthenticationError, ConflictError, DomainError, ValidationError

IMPERSONATION_KEY = "impersonate_user_id"


def actor_context(container: Container) -> ActorContext:
    """Resolve the logged-in user (and impersonated user, if any) from the Flask session."""
    user_id = session.get("user_id")
    if not user_id:
        raise AuthenticationError("Unauthorized")

    user = container.users_repo.get_by_id(int(user_id))
    if not user or not user.is_active:
        raise AuthenticationError("User not found")

    impersonated = None
    impersonated_id = session.get(IMPERSONATION_KEY)
    if impersonated_id:
        target = container.users_repo.get_by_id(int(impersonated_id))
        if target is None:
            session.pop(IMPERSONATION_KEY, None)
        else:
            impersonated = Actor.from_user(target)

    return resolve_actor_context(Actor.from_user(user), impersonated)


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def int_arg(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Query parameter {name} must be a number")


def required_int(body: dict, name: str) -> int:
    value = body.get(name)
    if value in (None, ""):
        raise ValidationError(f"{name} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number")


def optional_body_int(body: dict, name: str) -> Optional[int]:
    if body.get(name) in (None, ""):
        return None
    return required_int(body, name)


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: dict = {"success": True, "data": data}
    if message:
        payload["message"] = message
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        payload: dict = {"success": False, "error": exc.message, "code": exc.code}
        if isinstance(exc, ConflictError) and exc.existing_id is not None:
            payload["existingId"] = exc.existing_id
            payload["canEdit"] = exc.can_edit
        return jsonify(payload), exc.status_code
