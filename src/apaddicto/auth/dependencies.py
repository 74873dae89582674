"""FastAPI authentication dependencies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.service import get_user_by_id
from apaddicto.auth.sessions import SessionStore, get_session_store, unsign_token
from apaddicto.config import get_settings
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.errors import AuthenticationError, AuthorizationError

logger = structlog.get_logger()

AUTH_REQUIRED = "Authentification requise"


@dataclass
class CurrentSession:
    token: str
    data: dict[str, Any]


def get_session_token(request: Request) -> str | None:
    """Extract and verify the session token from the signed cookie."""
    cookie = request.cookies.get(get_settings().session_cookie_name)
    if not cookie:
        return None
    return unsign_token(cookie)


async def get_current_session(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
) -> CurrentSession:
    """Resolve the session for this request. Raises 401 when there is none."""
    token = get_session_token(request)
    if token is None:
        raise AuthenticationError(AUTH_REQUIRED)
    data = await sessions.read(token)
    if data is None:
        raise AuthenticationError(AUTH_REQUIRED)
    return CurrentSession(token=token, data=data)


async def get_current_user(
    current: CurrentSession = Depends(get_current_session),
    sessions: SessionStore = Depends(get_session_store),
    db: AsyncSession = Depends(get_session),
) -> User:
    """
    Load the User behind the session.

    A session pointing at a deleted user is destroyed and treated as
    unauthenticated. Deactivated accounts get 403.
    """
    user = await get_user_by_id(db, current.data.get("userId", ""))
    if user is None:
        await sessions.destroy(current.token)
        logger.info("orphan_session_destroyed", user_id=current.data.get("userId"))
        msg = "Session non valide"
        raise AuthenticationError(msg)
    if not user.is_active:
        msg = "Compte désactivé"
        raise AuthorizationError(msg)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Same as get_current_user but additionally requires role='admin'."""
    if user.role != "admin":
        msg = "Accès administrateur requis"
        raise AuthorizationError(msg)
    return user
