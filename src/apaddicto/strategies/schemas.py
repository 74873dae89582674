"""Request/response models for anti-craving strategy batches."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from apaddicto.auth.schemas import CamelModel


class StrategyBatchRequest(CamelModel):
    """Elements stay raw dicts; the service reports per-element errors."""

    strategies: Any = None


class StrategyResponse(CamelModel):
    id: str
    user_id: str
    context: str
    exercise: str
    effort: str
    duration: int
    craving_before: int
    craving_after: int
    created_at: datetime


class StrategyBatchResponse(CamelModel):
    success: bool = True
    strategies: list[StrategyResponse]
    count: int
    message: str
