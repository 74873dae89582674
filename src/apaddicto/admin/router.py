"""Admin router: user management under /api/admin."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.dependencies import require_admin
from apaddicto.auth.schemas import PublicUser
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.progress.schemas import stats_response
from apaddicto.users.schemas import AccountDeletedResponse, AdminUserResponse
from apaddicto.users.service import delete_user, list_users_with_stats

logger = structlog.get_logger()

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> list[AdminUserResponse]:
    """Every account with its progress stats."""
    rows = await list_users_with_stats(db)
    users = []
    for row in rows:
        user, stats = row["user"], row["stats"]
        public = PublicUser.model_validate(user)
        item = AdminUserResponse(**public.model_dump())
        if stats is not None:
            item.stats = stats_response(stats, user.points)
        users.append(item)
    return users


@router.delete("/users/{user_id}", response_model=AccountDeletedResponse)
async def remove_user(
    user_id: str,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
) -> AccountDeletedResponse:
    """Delete an account and all of its data."""
    removed = await delete_user(db, user_id)
    await db.commit()
    logger.info("user_deleted_by_admin", admin_id=admin.id, user_id=user_id)
    return AccountDeletedResponse(message="Utilisateur supprimé avec succès", removed=removed)
