"""Schemas for admin user listings."""

from __future__ import annotations

from apaddicto.auth.schemas import CamelModel, PublicUser
from apaddicto.progress.schemas import UserStatsResponse


class AdminUserResponse(PublicUser):
    stats: UserStatsResponse | None = None


class AccountDeletedResponse(CamelModel):
    message: str
    removed: dict[str, int] = {}
