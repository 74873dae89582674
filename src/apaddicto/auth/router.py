"""Authentication router for all /api/auth/* endpoints."""

from __future__ import annotations

import math

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.dependencies import get_current_session, get_current_user, get_session_token
from apaddicto.auth.rate_limiter import RateLimiter, get_auth_rate_limiter
from apaddicto.auth.schemas import LoginRequest, MessageResponse, PublicUser, RegisterRequest, UserEnvelope
from apaddicto.auth.service import authenticate_user, register_user
from apaddicto.auth.sessions import (
    SessionStore,
    clear_session_cookie,
    get_session_store,
    set_session_cookie,
    user_summary,
)
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.errors import AppError, AuthenticationError, AuthorizationError, RateLimitError

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def _check_rate_limit(limiter: RateLimiter, identifier: str) -> None:
    """Reject with 429 while the identifier is blocked."""
    if await limiter.is_rate_limited(identifier):
        remaining = math.ceil(await limiter.get_remaining_time(identifier))
        minutes = max(1, math.ceil(remaining / 60))
        logger.warning("auth_rate_limited", identifier=identifier, retry_after=remaining)
        msg = f"Trop de tentatives. Veuillez réessayer dans {minutes} minute(s)."
        raise RateLimitError(msg, retry_after=remaining)


async def _open_session(response: Response, sessions: SessionStore, user: User) -> None:
    token = await sessions.create(user_summary(user))
    set_session_cookie(response, token)


@router.post("/register", response_model=UserEnvelope)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_session),
    sessions: SessionStore = Depends(get_session_store),
    limiter: RateLimiter = Depends(get_auth_rate_limiter),
) -> UserEnvelope:
    """Register with email + password and open a session."""
    identifier = f"register:{_client_ip(request)}"
    await _check_rate_limit(limiter, identifier)

    try:
        user = await register_user(
            db,
            email=body.email,
            password=body.password,
            first_name=body.first_name,
            last_name=body.last_name,
            role=body.role,
        )
        await db.commit()
    except AppError:
        await limiter.record_attempt(identifier)
        raise

    await _open_session(response, sessions, user)
    return UserEnvelope(user=PublicUser.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_session),
    sessions: SessionStore = Depends(get_session_store),
    limiter: RateLimiter = Depends(get_auth_rate_limiter),
) -> UserEnvelope:
    """Login with email + password."""
    identifier = f"login:{_client_ip(request)}"
    await _check_rate_limit(limiter, identifier)

    try:
        user = await authenticate_user(db, body.email, body.password)
    except AppError as e:
        attempts = await limiter.record_attempt(identifier)
        logger.info("login_failed", identifier=identifier, attempts=attempts, kind=e.kind)
        raise

    await db.commit()
    await limiter.reset(identifier)
    await _open_session(response, sessions, user)
    logger.info("login_succeeded", user_id=user.id)
    return UserEnvelope(user=PublicUser.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
) -> MessageResponse:
    """Destroy the session and clear the cookie. Always succeeds."""
    token = get_session_token(request)
    if token is not None:
        await sessions.destroy(token)
    clear_session_cookie(response)
    return MessageResponse(message="Déconnexion réussie")


@router.get(
    "/me",
    response_model=UserEnvelope,
    responses={401: {"description": "No active session, or the account is deactivated"}},
)
async def me(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    db: AsyncSession = Depends(get_session),
) -> UserEnvelope | JSONResponse:
    """Return the authenticated user, or 401 with ``user: null``.

    A deactivated account is reported as signed out rather than forbidden.
    """
    try:
        current = await get_current_session(request, sessions)
        user = await get_current_user(current=current, sessions=sessions, db=db)
    except (AuthenticationError, AuthorizationError) as e:
        return JSONResponse(status_code=401, content={"user": None, "message": e.message})

    return UserEnvelope(user=PublicUser.model_validate(user))
