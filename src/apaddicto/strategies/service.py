"""
Anti-craving strategy batches.

A batch is validated element by element before anything is written; the
first invalid element rejects the whole batch.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select

from apaddicto.db.models import AntiCravingStrategy
from apaddicto.errors import ValidationError
from apaddicto.progress.craving_service import round_half_up

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

CONTEXTS = frozenset({"leisure", "home", "work"})
EFFORTS = frozenset({"faible", "modéré", "intense"})

REQUIRED_FIELDS = ("context", "exercise", "effort", "duration", "cravingBefore", "cravingAfter")

# Largest value a 32-bit INTEGER column holds.
MAX_DURATION = 2**31 - 1


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_strategy(strategy: object) -> tuple[list[str], list[str]]:
    """Return (missing_fields, invalid_fields) for one batch element."""
    if not isinstance(strategy, dict):
        return list(REQUIRED_FIELDS), []

    missing = [field for field in REQUIRED_FIELDS if _is_blank(strategy.get(field))]
    invalid = []

    context = strategy.get("context")
    if "context" not in missing and context not in CONTEXTS:
        invalid.append("context")
    effort = strategy.get("effort")
    if "effort" not in missing and effort not in EFFORTS:
        invalid.append("effort")
    exercise = strategy.get("exercise")
    if "exercise" not in missing and not isinstance(exercise, str):
        invalid.append("exercise")

    duration = strategy.get("duration")
    if "duration" not in missing and (not _is_number(duration) or not 0 < duration <= MAX_DURATION):
        invalid.append("duration")

    for field in ("cravingBefore", "cravingAfter"):
        value = strategy.get(field)
        if field not in missing and (not _is_number(value) or not 0 <= value <= 10):
            invalid.append(field)

    return missing, invalid


def _describe(missing: list[str], invalid: list[str]) -> str:
    parts = []
    if missing:
        parts.append("champs manquants: " + ", ".join(missing))
    if invalid:
        parts.append("champs invalides: " + ", ".join(invalid))
    return "; ".join(parts)


def validate_strategies(strategies: object) -> list[dict[str, Any]]:
    """Validate a whole batch, raising on the first invalid element.

    The raised ValidationError carries the 1-based ``index`` of the element
    along with its ``missingFields`` and ``invalidFields``.
    """
    if not isinstance(strategies, list) or not strategies:
        msg = "Au moins une stratégie doit être fournie"
        raise ValidationError(msg)

    for index, strategy in enumerate(strategies, start=1):
        missing, invalid = check_strategy(strategy)
        if missing or invalid:
            msg = f"Stratégie {index}: {_describe(missing, invalid)}"
            raise ValidationError(
                msg,
                details={"index": index, "missingFields": missing, "invalidFields": invalid},
            )
    return strategies


async def submit_strategies(
    db: AsyncSession, user_id: str, strategies: Sequence[dict[str, Any]] | object
) -> list[AntiCravingStrategy]:
    """Validate and stage a batch in one flush. Nothing is added when validation fails."""
    batch = validate_strategies(strategies)
    now = datetime.now(timezone.utc)

    rows = [
        AntiCravingStrategy(
            user_id=user_id,
            context=item["context"],
            exercise=item["exercise"].strip(),
            effort=item["effort"],
            duration=max(1, int(round_half_up(item["duration"]))),
            craving_before=int(round_half_up(item["cravingBefore"])),
            craving_after=int(round_half_up(item["cravingAfter"])),
            created_at=now,
        )
        for item in batch
    ]
    db.add_all(rows)
    await db.flush()

    logger.info("strategies_saved", user_id=user_id, count=len(rows))
    return rows


async def list_strategies(db: AsyncSession, user_id: str) -> list[AntiCravingStrategy]:
    """All strategies for a user, newest first."""
    result = await db.execute(
        select(AntiCravingStrategy)
        .where(AntiCravingStrategy.user_id == user_id)
        .order_by(AntiCravingStrategy.created_at.desc())
    )
    return list(result.scalars().all())
