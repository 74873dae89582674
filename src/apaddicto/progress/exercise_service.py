"""Exercise sessions and the completion pipeline.

Completing a session runs, in order: stats increment, points and level,
streak update, badge evaluation.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.config import get_settings
from apaddicto.db.models import ExerciseSession, User, UserStats
from apaddicto.errors import NotFoundError, ValidationError
from apaddicto.progress.badge_service import check_and_award_badges
from apaddicto.progress.streak_service import update_streak

logger = logging.getLogger(__name__)


def _optional_craving(value: object, field: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 10:
        msg = f"{field} doit être un entier entre 0 et 10"
        raise ValidationError(msg)
    return value


async def _increment_stats(db: AsyncSession, user_id: str, duration: int, now: datetime) -> int:
    """Atomic ``exercises_completed += 1, total_duration += duration``."""
    result = await db.execute(
        update(UserStats)
        .where(UserStats.user_id == user_id)
        .values(
            exercises_completed=UserStats.exercises_completed + 1,
            total_duration=UserStats.total_duration + duration,
            updated_at=now,
        )
        .returning(UserStats.exercises_completed)
    )
    completed = result.scalar_one_or_none()
    if completed is None:
        msg = "Statistiques utilisateur introuvables"
        raise NotFoundError(msg)
    return completed


async def grant_session_points(db: AsyncSession, user_id: str, now: datetime | None = None) -> tuple[int, int]:
    """Atomically add session points and the level derived from the new total.

    Both columns are set by one UPDATE, so concurrent completions never
    leave a level that disagrees with the points. Returns (points, level).
    """
    settings = get_settings()
    now = now or datetime.now(timezone.utc)
    gained = settings.points_per_session
    result = await db.execute(
        update(User)
        .where(User.id == user_id)
        .values(
            points=User.points + gained,
            level=(User.points + gained) // settings.points_per_level + 1,
            updated_at=now,
        )
        .returning(User.points, User.level)
    )
    row = result.one_or_none()
    if row is None:
        msg = "Utilisateur non trouvé"
        raise NotFoundError(msg)
    return row.points, row.level


async def record_exercise_session(
    db: AsyncSession,
    user_id: str,
    exercise_id: str,
    duration: int = 0,
    completed: bool = False,
    craving_before: int | None = None,
    craving_after: int | None = None,
) -> ExerciseSession:
    """Append an exercise session; a completed one updates all derived state."""
    if not exercise_id or not str(exercise_id).strip():
        msg = "L'identifiant de l'exercice est requis"
        raise ValidationError(msg)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        msg = "La durée doit être un entier positif (en secondes)"
        raise ValidationError(msg)

    now = datetime.now(timezone.utc)
    session = ExerciseSession(
        user_id=user_id,
        exercise_id=str(exercise_id).strip(),
        duration=duration,
        completed=bool(completed),
        craving_before=_optional_craving(craving_before, "cravingBefore"),
        craving_after=_optional_craving(craving_after, "cravingAfter"),
        created_at=now,
    )
    db.add(session)
    await db.flush()

    if session.completed:
        exercises_completed = await _increment_stats(db, user_id, duration, now)
        points, level = await grant_session_points(db, user_id, now)
        await update_streak(db, user_id, now)
        badges = await check_and_award_badges(db, user_id)
        logger.info(
            "Session completed by %s: %d exercises, %d points, level %d, %d new badge(s)",
            user_id, exercises_completed, points, level, len(badges),
        )

    return session


async def list_exercise_sessions(db: AsyncSession, user_id: str, limit: int = 50) -> list[ExerciseSession]:
    """Most recent sessions first."""
    result = await db.execute(
        select(ExerciseSession)
        .where(ExerciseSession.user_id == user_id)
        .order_by(ExerciseSession.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_user_stats(db: AsyncSession, user_id: str) -> UserStats | None:
    result = await db.execute(
        select(UserStats)
        .where(UserStats.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()
