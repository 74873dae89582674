"""Craving log and trend statistics."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.config import get_settings
from apaddicto.db.models import CravingEntry, UserStats
from apaddicto.errors import ValidationError

logger = logging.getLogger(__name__)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves towards +infinity, as dashboards expect (2.5 -> 3, -2.5 -> -2)."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def compute_craving_trend(intensities: Sequence[int]) -> dict:
    """Average and trend for intensities in chronological order.

    The series is split at floor(n/2). Trend is the percentage change of the
    second half's mean over the first half's mean; 0 when there are fewer
    than two entries or the first half averages 0.
    """
    n = len(intensities)
    if n == 0:
        return {"average": 0, "trend": 0}

    average = sum(intensities) / n
    mid = n // 2
    if mid < 1:
        return {"average": round_half_up(average, 1), "trend": 0}

    first_half = intensities[:mid]
    second_half = intensities[mid:]
    first_avg = sum(first_half) / len(first_half)
    second_avg = sum(second_half) / len(second_half)
    trend = (second_avg - first_avg) / first_avg * 100 if first_avg > 0 else 0

    return {"average": round_half_up(average, 1), "trend": int(round_half_up(trend))}


def _validate_intensity(intensity: object) -> int:
    if isinstance(intensity, bool) or not isinstance(intensity, int) or not 0 <= intensity <= 10:
        msg = "L'intensité doit être un entier entre 0 et 10"
        raise ValidationError(msg)
    return intensity


def _clean_tags(values: Sequence[str] | None) -> list[str]:
    """Deduplicate while keeping first-seen order; blanks are dropped."""
    seen: dict[str, None] = {}
    for value in values or []:
        tag = str(value).strip()
        if tag:
            seen.setdefault(tag, None)
    return list(seen)


async def get_craving_stats(db: AsyncSession, user_id: str, days: int | None = None) -> dict:
    """Average and trend over the last ``days`` days (default from settings)."""
    if days is None:
        days = get_settings().craving_stats_window_days
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    result = await db.execute(
        select(CravingEntry.intensity)
        .where(CravingEntry.user_id == user_id, CravingEntry.created_at >= cutoff)
        .order_by(CravingEntry.created_at.asc())
    )
    return compute_craving_trend(list(result.scalars()))


async def record_craving(
    db: AsyncSession,
    user_id: str,
    intensity: int,
    triggers: Sequence[str] | None = None,
    emotions: Sequence[str] | None = None,
    notes: str | None = None,
) -> CravingEntry:
    """Append a craving entry and refresh the user's rolling average."""
    entry = CravingEntry(
        user_id=user_id,
        intensity=_validate_intensity(intensity),
        triggers=_clean_tags(triggers),
        emotions=_clean_tags(emotions),
        notes=notes.strip() if notes and notes.strip() else None,
        created_at=datetime.now(timezone.utc),
    )
    db.add(entry)
    await db.flush()

    stats = await get_craving_stats(db, user_id)
    await db.execute(
        update(UserStats)
        .where(UserStats.user_id == user_id)
        .values(
            average_craving=int(round_half_up(stats["average"])),
            updated_at=datetime.now(timezone.utc),
        )
    )
    logger.debug("Craving recorded for %s (avg=%s trend=%s)", user_id, stats["average"], stats["trend"])
    return entry


async def list_craving_entries(db: AsyncSession, user_id: str, limit: int = 50) -> list[CravingEntry]:
    """Most recent entries first."""
    result = await db.execute(
        select(CravingEntry)
        .where(CravingEntry.user_id == user_id)
        .order_by(CravingEntry.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
