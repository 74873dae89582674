"""Progress endpoints: craving log, exercise sessions and Beck worksheets."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.dependencies import get_current_user
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.progress.beck_service import create_beck_analysis, list_beck_analyses
from apaddicto.progress.craving_service import get_craving_stats, list_craving_entries, record_craving
from apaddicto.progress.exercise_service import list_exercise_sessions, record_exercise_session
from apaddicto.progress.schemas import (
    BeckAnalysisCreateRequest,
    BeckAnalysisResponse,
    CravingCreateRequest,
    CravingEntryEnvelope,
    CravingEntryResponse,
    CravingStatsResponse,
    ExerciseSessionCreateRequest,
    ExerciseSessionEnvelope,
    ExerciseSessionResponse,
)

router = APIRouter(prefix="/api", tags=["Progress"])


# ── Cravings ──


@router.post("/cravings", response_model=CravingEntryEnvelope)
async def create_craving(
    body: CravingCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CravingEntryEnvelope:
    """Log a craving and refresh the rolling average."""
    entry = await record_craving(
        db,
        user.id,
        intensity=body.intensity,
        triggers=body.triggers,
        emotions=body.emotions,
        notes=body.notes,
    )
    await db.commit()
    return CravingEntryEnvelope(entry=CravingEntryResponse.model_validate(entry))


@router.get("/cravings", response_model=list[CravingEntryResponse])
async def list_cravings(
    limit: int = Query(50, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[CravingEntryResponse]:
    entries = await list_craving_entries(db, user.id, limit)
    return [CravingEntryResponse.model_validate(e) for e in entries]


@router.get("/cravings/stats", response_model=CravingStatsResponse)
async def craving_stats(
    days: int | None = Query(None, ge=1, le=3650),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CravingStatsResponse:
    """Average intensity and trend (percent) over the last ``days`` days."""
    stats = await get_craving_stats(db, user.id, days)
    return CravingStatsResponse(**stats)


# ── Exercise sessions ──


@router.post("/exercise-sessions", response_model=ExerciseSessionEnvelope)
async def create_exercise_session(
    body: ExerciseSessionCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ExerciseSessionEnvelope:
    """Record a session. Completed sessions update stats, points, streak and badges."""
    session = await record_exercise_session(
        db,
        user.id,
        exercise_id=body.exercise_id,
        duration=body.duration,
        completed=body.completed,
        craving_before=body.craving_before,
        craving_after=body.craving_after,
    )
    await db.commit()
    return ExerciseSessionEnvelope(session=ExerciseSessionResponse.model_validate(session))


@router.get("/exercise-sessions", response_model=list[ExerciseSessionResponse])
async def list_sessions(
    limit: int = Query(50, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[ExerciseSessionResponse]:
    sessions = await list_exercise_sessions(db, user.id, limit)
    return [ExerciseSessionResponse.model_validate(s) for s in sessions]


# ── Beck analyses ──


@router.post("/beck-analyses", response_model=BeckAnalysisResponse)
async def create_analysis(
    body: BeckAnalysisCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BeckAnalysisResponse:
    analysis = await create_beck_analysis(db, user.id, **body.model_dump())
    await db.commit()
    return BeckAnalysisResponse.model_validate(analysis)


@router.get("/beck-analyses", response_model=list[BeckAnalysisResponse])
async def list_analyses(
    limit: int = Query(20, ge=1, le=200),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[BeckAnalysisResponse]:
    analyses = await list_beck_analyses(db, user.id, limit)
    return [BeckAnalysisResponse.model_validate(a) for a in analyses]
