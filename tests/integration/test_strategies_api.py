"""Integration tests for anti-craving strategy batches."""

import json

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apaddicto.db.models import AntiCravingStrategy


def strategy(**overrides):
    base = {
        "context": "leisure",
        "exercise": "Marche rapide",
        "effort": "intense",
        "duration": 15,
        "cravingBefore": 8,
        "cravingAfter": 3,
    }
    base.update(overrides)
    return base


async def count_strategies(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(AntiCravingStrategy))).scalar_one()


class TestSubmitStrategies:
    async def test_valid_batch_is_saved(self, authed_client: AsyncClient):
        batch = [strategy(), strategy(context="work", effort="faible", cravingBefore=0, cravingAfter=0)]
        response = await authed_client.post("/api/strategies", json={"strategies": batch})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["message"] == "2 stratégie(s) sauvegardée(s) avec succès"
        assert [s["context"] for s in body["strategies"]] == ["leisure", "work"]
        assert body["strategies"][1]["cravingAfter"] == 0

        listed = (await authed_client.get("/api/strategies")).json()
        assert len(listed) == 2

    async def test_invalid_element_rejects_whole_batch(self, authed_client: AsyncClient, db_session: AsyncSession):
        second = strategy()
        del second["cravingAfter"]
        response = await authed_client.post(
            "/api/strategies", json={"strategies": [strategy(), second, strategy()]}
        )

        assert response.status_code == 400
        body = response.json()
        assert body["index"] == 2
        assert body["missingFields"] == ["cravingAfter"]
        assert body["invalidFields"] == []
        assert body["message"].startswith("Stratégie 2")
        assert await count_strategies(db_session) == 0

    async def test_invalid_values_reported(self, authed_client: AsyncClient):
        response = await authed_client.post(
            "/api/strategies", json={"strategies": [strategy(context="bar", cravingBefore=12)]}
        )
        assert response.status_code == 400
        assert response.json()["invalidFields"] == ["context", "cravingBefore"]

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity", "1e300"])
    async def test_non_finite_or_huge_duration_is_a_validation_error(
        self, authed_client: AsyncClient, db_session: AsyncSession, literal: str
    ):
        # httpx refuses to encode NaN and Infinity, so the body is written by hand.
        item = json.dumps(strategy(duration=0)).replace('"duration": 0', f'"duration": {literal}')
        response = await authed_client.post(
            "/api/strategies",
            content=f'{{"strategies": [{item}]}}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["invalidFields"] == ["duration"]
        assert await count_strategies(db_session) == 0

    async def test_empty_batch(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/strategies", json={"strategies": []})
        assert response.status_code == 400
        assert response.json()["message"] == "Au moins une stratégie doit être fournie"

    async def test_batch_must_be_a_list(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/strategies", json={"strategies": strategy()})
        assert response.status_code == 400

    async def test_strategies_are_private(self, authed_client: AsyncClient):
        await authed_client.post("/api/strategies", json={"strategies": [strategy()]})
        await authed_client.post("/api/auth/logout")

        await authed_client.post("/api/auth/register", json={"email": "other@b.com", "password": "pass1"})
        assert (await authed_client.get("/api/strategies")).json() == []
