"""Account deletion cascades through every user-owned table."""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.db.models import (
    AntiCravingStrategy,
    BeckAnalysis,
    CravingEntry,
    ExerciseSession,
    User,
    UserBadge,
    UserStats,
)
from apaddicto.errors import NotFoundError
from apaddicto.progress.badge_service import award_badge
from apaddicto.users.service import delete_user
from tests.conftest import login, register

OWNED = (UserBadge, UserStats, BeckAnalysis, ExerciseSession, CravingEntry, AntiCravingStrategy)


async def populate(client: AsyncClient) -> None:
    await client.post("/api/cravings", json={"intensity": 6})
    await client.post("/api/exercise-sessions", json={"exerciseId": "walk", "duration": 60, "completed": True})
    await client.post("/api/beck-analyses", json={"situation": "Soirée"})
    await client.post(
        "/api/strategies",
        json={"strategies": [{
            "context": "home", "exercise": "Lecture", "effort": "faible",
            "duration": 20, "cravingBefore": 5, "cravingAfter": 2,
        }]},
    )


async def count(db: AsyncSession, model, user_id: str) -> int:
    column = model.id if model is User else model.user_id
    return (await db.execute(select(func.count()).where(column == user_id))).scalar_one()


class TestDeleteOwnAccount:
    async def test_delete_profile_removes_everything(self, authed_client: AsyncClient, db_session: AsyncSession):
        user_id = (await authed_client.get("/api/users/profile")).json()["user"]["id"]
        await populate(authed_client)
        await award_badge(db_session, user_id, "50_exercises")
        await db_session.commit()

        response = await authed_client.delete("/api/users/profile")
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Compte supprimé avec succès"
        assert body["removed"]["user_badges"] == 1
        assert body["removed"]["anti_craving_strategies"] == 1

        for model in (*OWNED, User):
            assert await count(db_session, model, user_id) == 0, model.__tablename__

        # Session is gone and the credentials no longer work
        assert (await authed_client.get("/api/auth/me")).status_code == 401
        assert (await login(authed_client)).status_code == 401

    async def test_other_users_are_untouched(self, client: AsyncClient, db_session: AsyncSession):
        other_id = (await register(client, email="other@b.com")).json()["user"]["id"]
        await populate(client)
        await client.post("/api/auth/logout")

        await register(client)
        await client.delete("/api/users/profile")

        for model in (UserStats, CravingEntry, ExerciseSession, BeckAnalysis, AntiCravingStrategy, User):
            assert await count(db_session, model, other_id) == 1, model.__tablename__


class TestDeleteUserService:
    async def test_unknown_user(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await delete_user(db_session, "missing")
