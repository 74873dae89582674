"""Daily practice streaks, updated when an exercise session is completed."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.db.models import UserStats

logger = logging.getLogger(__name__)


def next_streak(
    current_streak: int,
    longest_streak: int,
    last_activity: date | None,
    activity_day: date,
) -> tuple[int, int]:
    """Return (current, longest) after activity on ``activity_day``.

    Same day: unchanged. Following day: +1. Any gap (or first activity): 1.
    Activity dated before the last recorded day does not move the streak.
    """
    if last_activity is None:
        current = 1
    else:
        gap = (activity_day - last_activity).days
        if gap <= 0:
            current = max(current_streak, 1)
        elif gap == 1:
            current = current_streak + 1
        else:
            current = 1
    return current, max(longest_streak, current)


async def update_streak(db: AsyncSession, user_id: str, when: datetime | None = None) -> UserStats | None:
    """Apply one day of activity to the user's streak.

    The stats row is locked for the read-modify-write so concurrent
    completions for the same user are serialized (no-op on SQLite).
    """
    if when is None:
        when = datetime.now(timezone.utc)
    activity_day = when.date()

    result = await db.execute(
        select(UserStats)
        .where(UserStats.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    stats = result.scalar_one_or_none()
    if stats is None:
        logger.warning("No stats row for user %s; streak not updated", user_id)
        return None

    previous = stats.current_streak or 0
    current, longest = next_streak(
        previous, stats.longest_streak or 0, stats.last_activity_date, activity_day
    )
    stats.current_streak = current
    stats.longest_streak = longest
    if stats.last_activity_date is None or activity_day > stats.last_activity_date:
        stats.last_activity_date = activity_day
    stats.updated_at = when
    await db.flush()

    if current > previous:
        logger.info("Streak for %s is now %d day(s)", user_id, current)
    return stats
