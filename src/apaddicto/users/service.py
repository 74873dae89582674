"""Account lifecycle: deletion cascade and admin listings."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import delete, select

from apaddicto.db.models import (
    AntiCravingStrategy,
    BeckAnalysis,
    CravingEntry,
    ExerciseSession,
    User,
    UserBadge,
    UserStats,
)
from apaddicto.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

# Dependents first, the user row last.
_CASCADE = (UserBadge, UserStats, BeckAnalysis, ExerciseSession, CravingEntry, AntiCravingStrategy)


async def delete_user(db: AsyncSession, user_id: str) -> dict[str, int]:
    """
    Delete a user and every row that references it, in one transaction.

    Everything runs in the caller's transaction; the caller commits. An
    exception before the commit leaves no rows deleted. Returns the number
    of rows removed per table.

    Raises:
        NotFoundError: User does not exist.
    """
    user = await db.get(User, user_id)
    if user is None:
        msg = "Utilisateur non trouvé"
        raise NotFoundError(msg)

    removed: dict[str, int] = {}
    for model in _CASCADE:
        result = await db.execute(delete(model).where(model.user_id == user_id))
        removed[model.__tablename__] = result.rowcount or 0
    await db.execute(delete(User).where(User.id == user_id))
    await db.flush()

    logger.info("user_deleted", user_id=user_id, **removed)
    return removed


async def list_users_with_stats(db: AsyncSession) -> list[dict[str, Any]]:
    """All users with their stats row, newest accounts first."""
    result = await db.execute(
        select(User, UserStats)
        .outerjoin(UserStats, UserStats.user_id == User.id)
        .order_by(User.created_at.desc())
    )
    return [{"user": user, "stats": stats} for user, stats in result.all()]
