"""
Server-side sessions keyed by an opaque token.

The token is random; the cookie carries it signed with the session secret
(HS256 JWT) so a tampered cookie is rejected before any store lookup. The
session summary itself lives in the key-value store with a TTL equal to the
cookie max-age.
"""

from __future__ import annotations

import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Response

from apaddicto.config import get_settings
from apaddicto.db.models import User
from apaddicto.store import KeyValueStore, get_store

_ALGORITHM = "HS256"


def user_summary(user: User) -> dict[str, Any]:
    """The subset of a user kept in a session."""
    return {
        "userId": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role,
    }


class SessionStore:
    """create/read/destroy sessions in a key-value store."""

    def __init__(self, store: KeyValueStore, max_age_seconds: int) -> None:
        self.store = store
        self.max_age_seconds = max_age_seconds

    @staticmethod
    def _key(token: str) -> str:
        return f"session:{token}"

    async def create(self, summary: dict[str, Any]) -> str:
        token = secrets.token_urlsafe(32)
        await self.store.set(self._key(token), json.dumps(summary), ttl_seconds=self.max_age_seconds)
        return token

    async def read(self, token: str) -> dict[str, Any] | None:
        raw = await self.store.get(self._key(token))
        if raw is None:
            return None
        return json.loads(raw)

    async def destroy(self, token: str) -> None:
        await self.store.delete(self._key(token))


def get_session_store() -> SessionStore:
    """SessionStore bound to the process-wide key-value store (FastAPI dependency)."""
    settings = get_settings()
    return SessionStore(get_store(), settings.session_max_age_seconds)


# ---------------------------------------------------------------------------
# Cookie signing
# ---------------------------------------------------------------------------


def sign_token(token: str) -> str:
    """Wrap a session token in a signed, expiring cookie value."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sid": token,
        "iat": now,
        "exp": now + timedelta(seconds=settings.session_max_age_seconds),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=_ALGORITHM)


def unsign_token(cookie_value: str) -> str | None:
    """Return the session token from a cookie value, or None if invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(cookie_value, settings.session_secret, algorithms=[_ALGORITHM])
    except jwt.InvalidTokenError:
        return None
    sid = payload.get("sid")
    return sid if isinstance(sid, str) else None


def set_session_cookie(response: Response, token: str) -> None:
    """httpOnly, SameSite=Lax, Secure only in production."""
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=sign_token(token),
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )
