"""Beck cognitive-restructuring worksheets."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.db.models import BeckAnalysis
from apaddicto.errors import ValidationError

_INTENSITY_FIELDS = ("emotion_intensity", "new_intensity")


async def create_beck_analysis(db: AsyncSession, user_id: str, **fields: object) -> BeckAnalysis:
    for name in _INTENSITY_FIELDS:
        value = fields.get(name)
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 10):
            msg = f"{name} doit être un entier entre 0 et 10"
            raise ValidationError(msg)

    analysis = BeckAnalysis(user_id=user_id, created_at=datetime.now(timezone.utc), **fields)
    db.add(analysis)
    await db.flush()
    return analysis


async def list_beck_analyses(db: AsyncSession, user_id: str, limit: int = 20) -> list[BeckAnalysis]:
    result = await db.execute(
        select(BeckAnalysis)
        .where(BeckAnalysis.user_id == user_id)
        .order_by(BeckAnalysis.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())
