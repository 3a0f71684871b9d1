"""Bearer token authentication for the REST API.

Tokens are issued by the auth service and signed with JWT_SECRET. The
payload carries `userId` and `role`; email and name are loaded from the
users table because the audit trail needs them.
"""
# ruff: noqa: B008

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db.engine import get_session
from src.models.enums import UserRole
from src.models.user import User
from src.schemas.common import Actor

bearer_scheme = HTTPBearer(auto_error=False)


class TokenError(Exception):
    """Raised when a bearer token cannot be trusted."""


def _unauthorized(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message, "code": code},
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> tuple[uuid.UUID, UserRole]:
    """Verify a bearer token and return (user id, role).

    Raises TokenError on bad signature, expiry, or malformed payload.
    """
    secret = settings.security.jwt_secret
    if not secret:
        msg = "JWT_SECRET not configured"
        raise TokenError(msg)
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.security.jwt_algorithm])
    except jwt.PyJWTError as exc:
        raise TokenError(str(exc)) from exc

    try:
        user_id = uuid.UUID(str(payload["userId"]))
        role = UserRole(payload["role"])
    except (KeyError, ValueError) as exc:
        msg = "Token payload must carry userId and role"
        raise TokenError(msg) from exc
    return user_id, role


def create_token(user_id: uuid.UUID, role: UserRole, ttl: timedelta) -> str:
    """Sign a token in the format the API accepts (development and tests)."""
    payload: dict[str, Any] = {
        "userId": str(user_id),
        "role": role.value,
        "exp": datetime.now(UTC) + ttl,
    }
    return jwt.encode(payload, settings.security.jwt_secret, algorithm=settings.security.jwt_algorithm)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_session),
) -> Actor:
    """FastAPI dependency: resolve the calling actor or raise 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Access token required", "UNAUTHORIZED")

    try:
        user_id, role = decode_token(credentials.credentials)
    except TokenError:
        raise _unauthorized("Invalid token", "INVALID_TOKEN") from None

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("Invalid token", "INVALID_TOKEN")

    return Actor(id=user.id, email=user.email, name=user.name, role=role)


def require_roles(*roles: UserRole) -> Callable[..., Awaitable[Actor]]:
    """Dependency factory: only the given roles get through, everyone else gets 403."""
    allowed = frozenset(roles)

    async def role_checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": "Insufficient permissions", "code": "FORBIDDEN"},
            )
        return actor

    return role_checker
