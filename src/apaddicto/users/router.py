"""User router for all /api/users/* endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.dependencies import CurrentSession, get_current_session, get_current_user
from apaddicto.auth.schemas import (
    ChangePasswordRequest,
    MessageResponse,
    ProfileUpdateRequest,
    PublicUser,
    UserEnvelope,
)
from apaddicto.auth.service import update_password, update_user
from apaddicto.auth.sessions import (
    SessionStore,
    clear_session_cookie,
    get_session_store,
    set_session_cookie,
    user_summary,
)
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.errors import NotFoundError
from apaddicto.progress.badge_service import list_user_badges
from apaddicto.progress.exercise_service import get_user_stats
from apaddicto.progress.schemas import UserBadgeResponse, UserStatsResponse, stats_response
from apaddicto.users.schemas import AccountDeletedResponse
from apaddicto.users.service import delete_user

router = APIRouter(prefix="/api/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=UserEnvelope)
async def get_profile(user: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=PublicUser.model_validate(user))


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    body: ProfileUpdateRequest,
    response: Response,
    user: User = Depends(get_current_user),
    current: CurrentSession = Depends(get_current_session),
    sessions: SessionStore = Depends(get_session_store),
    db: AsyncSession = Depends(get_session),
) -> UserEnvelope:
    """Update names and/or email. The session is reissued with the new summary."""
    updated = await update_user(
        db,
        user.id,
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
    )
    await db.commit()

    await sessions.destroy(current.token)
    token = await sessions.create(user_summary(updated))
    set_session_cookie(response, token)
    return UserEnvelope(user=PublicUser.model_validate(updated))


@router.delete("/profile", response_model=AccountDeletedResponse)
async def delete_profile(
    response: Response,
    user: User = Depends(get_current_user),
    current: CurrentSession = Depends(get_current_session),
    sessions: SessionStore = Depends(get_session_store),
    db: AsyncSession = Depends(get_session),
) -> AccountDeletedResponse:
    """Delete the account and all of its data, then end the session."""
    removed = await delete_user(db, user.id)
    await db.commit()

    await sessions.destroy(current.token)
    clear_session_cookie(response)
    return AccountDeletedResponse(message="Compte supprimé avec succès", removed=removed)


@router.put("/password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await update_password(db, user.id, body.old_password, body.new_password)
    await db.commit()
    return MessageResponse(message="Mot de passe mis à jour avec succès")


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


@router.get("/stats", response_model=UserStatsResponse)
async def get_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserStatsResponse:
    """Stats row plus points, level and progress towards the next level."""
    stats = await get_user_stats(db, user.id)
    if stats is None:
        msg = "Statistiques utilisateur introuvables"
        raise NotFoundError(msg)

    await db.refresh(user, ["points", "level"])
    return stats_response(stats, user.points)


@router.get("/badges", response_model=list[UserBadgeResponse])
async def get_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[UserBadgeResponse]:
    badges = await list_user_badges(db, user.id)
    return [UserBadgeResponse.model_validate(b) for b in badges]
