"""Badge rules and idempotent awarding."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.db.models import UserBadge, UserStats

logger = logging.getLogger(__name__)

# badge_type -> predicate over the user's stats row. Extend by adding entries.
BADGE_RULES: dict[str, Callable[[UserStats], bool]] = {
    "50_exercises": lambda stats: (stats.exercises_completed or 0) >= 50,
}


async def has_badge(db: AsyncSession, user_id: str, badge_type: str) -> bool:
    """Check if user already has a specific badge."""
    result = await db.execute(
        select(UserBadge.id).where(
            UserBadge.user_id == user_id,
            UserBadge.badge_type == badge_type,
        )
    )
    return result.scalar_one_or_none() is not None


def _insert_ignoring_duplicates(db: AsyncSession):  # noqa: ANN202
    dialect = db.get_bind().dialect.name
    return sqlite_insert if dialect == "sqlite" else pg_insert


async def award_badge(db: AsyncSession, user_id: str, badge_type: str) -> UserBadge | None:
    """Award a badge to a user.

    Returns the new UserBadge, or None if it was already earned. The insert
    is ``ON CONFLICT DO NOTHING`` against UNIQUE(user_id, badge_type), so two
    concurrent awards still produce a single row.
    """
    if await has_badge(db, user_id, badge_type):
        return None

    insert = _insert_ignoring_duplicates(db)
    stmt = (
        insert(UserBadge)
        .values(user_id=user_id, badge_type=badge_type, earned_at=datetime.now(timezone.utc))
        .on_conflict_do_nothing(index_elements=["user_id", "badge_type"])
        .returning(UserBadge.id)
    )
    result = await db.execute(stmt)
    badge_id = result.scalar_one_or_none()
    if badge_id is None:
        return None  # Race condition: badge already awarded

    logger.info("Badge %s awarded to %s", badge_type, user_id)
    return await db.get(UserBadge, badge_id)


async def check_and_award_badges(db: AsyncSession, user_id: str) -> list[UserBadge]:
    """Evaluate every rule against the user's stats. Returns newly awarded badges."""
    result = await db.execute(
        select(UserStats)
        .where(UserStats.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    stats = result.scalar_one_or_none()
    if stats is None:
        return []

    awarded = []
    for badge_type, rule in BADGE_RULES.items():
        if rule(stats):
            badge = await award_badge(db, user_id, badge_type)
            if badge is not None:
                awarded.append(badge)
    return awarded


async def list_user_badges(db: AsyncSession, user_id: str) -> list[UserBadge]:
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc())
    )
    return list(result.scalars().all())
