"""Anti-craving strategy endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.auth.dependencies import get_current_user
from apaddicto.database import get_session
from apaddicto.db.models import User
from apaddicto.strategies.schemas import StrategyBatchRequest, StrategyBatchResponse, StrategyResponse
from apaddicto.strategies.service import list_strategies, submit_strategies

router = APIRouter(prefix="/api/strategies", tags=["Strategies"])


@router.post("", response_model=StrategyBatchResponse)
async def submit(
    body: StrategyBatchRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> StrategyBatchResponse:
    """Save a batch of strategies. The whole batch is rejected if one element is invalid."""
    rows = await submit_strategies(db, user.id, body.strategies)
    await db.commit()
    count = len(rows)
    return StrategyBatchResponse(
        strategies=[StrategyResponse.model_validate(r) for r in rows],
        count=count,
        message=f"{count} stratégie(s) sauvegardée(s) avec succès",
    )


@router.get("", response_model=list[StrategyResponse])
async def list_all(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> list[StrategyResponse]:
    rows = await list_strategies(db, user.id)
    return [StrategyResponse.model_validate(r) for r in rows]
