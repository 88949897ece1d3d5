from __future__ import annotations

import logging

from flask import Flask, request, session

from ..access.context import Actor
from ..access.matrix import require_access
from ..container import Container
from ..core.enums import Operation
from ..core.exceptions import NotFoundError
from ..web import IMPERSONATION_KEY, actor_context, int_arg, json_body, ok, required_int
from .model import User
from .service import parse_role, parse_voice_part

logger = logging.getLogger(__name__)


def actor_dict(actor: Actor) -> dict:
    return {
        "userId": actor.user_id,
        "role": actor.role.value,
        "districtId": actor.district_id,
        "voicePart": actor.voice_part.value if actor.voice_part else None,
    }


def user_dict(user: User) -> dict:
    return {
        "id": user.user_id,
        "fullName": user.full_name,
        "email": user.email,
        "role": user.role.value,
        "districtId": user.district_id,
        "voicePart": user.voice_part.value if user.voice_part else None,
        "isActive": user.is_active,
    }


def register(app: Flask, container: Container) -> None:
    users = container.user_service

    @app.route("/api/v1/auth/me", methods=["GET"], endpoint="auth_me")
    def me():
        ctx = actor_context(container)
        return ok(
            {
                "actual": actor_dict(ctx.actual),
                "effective": actor_dict(ctx.effective),
                "impersonating": ctx.is_impersonating,
            }
        )

    @app.route("/api/v1/auth/impersonate", methods=["POST"], endpoint="auth_impersonate")
    def impersonate():
        ctx = actor_context(container)
        require_access(ctx, Operation.IMPERSONATE, message="Only administrators can impersonate users")

        target_id = required_int(json_body(), "userId")
        target = container.users_repo.get_by_id(target_id)
        if target is None:
            raise NotFoundError("User not found")

        if target.user_id == ctx.actual.user_id:
            session.pop(IMPERSONATION_KEY, None)
        else:
            session[IMPERSONATION_KEY] = target.user_id
        logger.info("impersonation started: admin=%s as=%s", ctx.actual.user_id, target.user_id)
        return ok(actor_dict(Actor.from_user(target)), message=f"Now acting as {target.full_name}")

    @app.route("/api/v1/auth/impersonate", methods=["DELETE"], endpoint="auth_stop_impersonate")
    def stop_impersonating():
        ctx = actor_context(container)
        session.pop(IMPERSONATION_KEY, None)
        if ctx.is_impersonating:
            logger.info("impersonation ended: admin=%s", ctx.actual.user_id)
        return ok(actor_dict(ctx.actual))

    @app.route("/api/v1/users", methods=["GET"], endpoint="users_list")
    def list_users():
        ctx = actor_context(container)
        role = request.args.get("role")
        part = request.args.get("voicePart")
        rows = users.list_users(
            ctx,
            district_id=int_arg("districtId"),
            role=parse_role(role) if role else None,
            voice_part=parse_voice_part(part) if part else None,
        )
        return ok({"users": [user_dict(u) for u in rows], "total": len(rows)})

    @app.route("/api/v1/users", methods=["POST"], endpoint="users_create")
    def create_user():
        ctx = actor_context(container)
        body = json_body()
        user = users.create_user(
            ctx,
            full_name=body.get("fullName"),
            email=body.get("email"),
            district_id=body.get("districtId"),
            role=body.get("role"),
            voice_part=body.get("voicePart"),
        )
        return ok(user_dict(user), message="User created", status=201)

    @app.route("/api/v1/users/<int:user_id>", methods=["GET"], endpoint="users_get")
    def get_user(user_id: int):
        ctx = actor_context(container)
        return ok(user_dict(users.get_user(ctx, user_id)))

    @app.route("/api/v1/users/<int:user_id>", methods=["DELETE"], endpoint="users_delete")
    def delete_user(user_id: int):
        ctx = actor_context(container)
        users.delete_user(ctx, user_id)
        return ok(message="User deleted")
