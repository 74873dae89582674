"""Points and level computation.

A completed exercise session is worth ``points_per_session`` points; every
``points_per_level`` points is one level, starting at level 1.
"""

from __future__ import annotations

from apaddicto.config import get_settings


def compute_level(points: int, points_per_level: int | None = None) -> int:
    """Level for a points total: floor(points / points_per_level) + 1."""
    if points_per_level is None:
        points_per_level = get_settings().points_per_level
    return max(points, 0) // points_per_level + 1


def level_progress(points: int, points_per_level: int | None = None) -> dict:
    """Level plus how far the user is into it, for progress bars."""
    if points_per_level is None:
        points_per_level = get_settings().points_per_level
    level = compute_level(points, points_per_level)
    return {
        "level": level,
        "points": points,
        "points_into_level": max(points, 0) % points_per_level,
        "points_for_level": points_per_level,
        "next_level": level + 1,
    }
