"""Request/response models for cravings, exercise sessions, stats and badges."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from apaddicto.auth.schemas import CamelModel
from apaddicto.progress.levels import level_progress


# --- Cravings ---


class CravingCreateRequest(CamelModel):
    intensity: int
    triggers: list[str] = Field(default_factory=list)
    emotions: list[str] = Field(default_factory=list)
    notes: str | None = None


class CravingEntryResponse(CamelModel):
    id: str
    user_id: str
    intensity: int
    triggers: list[str] = []
    emotions: list[str] = []
    notes: str | None = None
    created_at: datetime


class CravingEntryEnvelope(CamelModel):
    entry: CravingEntryResponse


class CravingStatsResponse(CamelModel):
    average: float
    trend: int


# --- Exercise sessions ---


class ExerciseSessionCreateRequest(CamelModel):
    exercise_id: str
    duration: int = 0
    completed: bool = False
    craving_before: int | None = None
    craving_after: int | None = None


class ExerciseSessionResponse(CamelModel):
    id: str
    user_id: str
    exercise_id: str
    duration: int
    completed: bool
    craving_before: int | None = None
    craving_after: int | None = None
    created_at: datetime


class ExerciseSessionEnvelope(CamelModel):
    session: ExerciseSessionResponse


# --- Beck analyses ---


class BeckAnalysisCreateRequest(CamelModel):
    situation: str | None = None
    automatic_thoughts: str | None = None
    emotions: str | None = None
    emotion_intensity: int | None = None
    rational_response: str | None = None
    new_feeling: str | None = None
    new_intensity: int | None = None


class BeckAnalysisResponse(BeckAnalysisCreateRequest):
    id: str
    user_id: str
    created_at: datetime


# --- Stats and badges ---


class UserStatsResponse(CamelModel):
    exercises_completed: int = 0
    total_duration: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    average_craving: int = 0
    last_activity_date: date | None = None
    points: int = 0
    level: int = 1
    points_into_level: int = 0
    points_for_level: int = 100


class UserBadgeResponse(CamelModel):
    id: str
    badge_type: str
    earned_at: datetime


def stats_response(stats, points: int) -> UserStatsResponse:  # noqa: ANN001
    """Combine a UserStats row with the user's points and level progress."""
    progress = level_progress(points or 0)
    return UserStatsResponse(
        exercises_completed=stats.exercises_completed or 0,
        total_duration=stats.total_duration or 0,
        current_streak=stats.current_streak or 0,
        longest_streak=stats.longest_streak or 0,
        average_craving=stats.average_craving or 0,
        last_activity_date=stats.last_activity_date,
        points=progress["points"],
        level=progress["level"],
        points_into_level=progress["points_into_level"],
        points_for_level=progress["points_for_level"],
    )
