"""Integration tests for /api/users/* and /api/admin/*."""

from httpx import AsyncClient

from apaddicto.config import get_settings
from tests.conftest import ADMIN_EMAIL, login, register


class TestProfile:
    async def test_get_profile(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/users/profile")
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["firstName"] == "Alice"
        assert user["lastName"] == "Martin"
        assert "password" not in user

    async def test_update_profile_refreshes_session(self, authed_client: AsyncClient):
        response = await authed_client.put(
            "/api/users/profile", json={"firstName": "Alicia", "email": "Alicia@B.com"}
        )
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "alicia@b.com"

        me = (await authed_client.get("/api/auth/me")).json()["user"]
        assert me["firstName"] == "Alicia"
        assert me["lastName"] == "Martin"

    async def test_update_to_taken_email(self, client: AsyncClient):
        await register(client, email="taken@b.com")
        await client.post("/api/auth/logout")
        await register(client)

        response = await client.put("/api/users/profile", json={"email": "TAKEN@b.com"})
        assert response.status_code == 409
        assert response.json()["message"] == "Cet email est déjà utilisé par un autre compte."

    async def test_update_with_invalid_email(self, authed_client: AsyncClient):
        response = await authed_client.put("/api/users/profile", json={"email": "nope"})
        assert response.status_code == 400


class TestChangePassword:
    async def test_change_password(self, authed_client: AsyncClient):
        response = await authed_client.put(
            "/api/users/password", json={"oldPassword": "pass1", "newPassword": "newpass1"}
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Mot de passe mis à jour avec succès"}

        assert (await login(authed_client, password="pass1")).status_code == 401
        assert (await login(authed_client, password="newpass1")).status_code == 200

    async def test_wrong_old_password(self, authed_client: AsyncClient):
        response = await authed_client.put(
            "/api/users/password", json={"oldPassword": "nope", "newPassword": "newpass1"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "L'ancien mot de passe est incorrect."

    async def test_new_password_too_short(self, authed_client: AsyncClient):
        response = await authed_client.put(
            "/api/users/password", json={"oldPassword": "pass1", "newPassword": "abc"}
        )
        assert response.status_code == 400

    async def test_requires_session(self, client: AsyncClient):
        response = await client.put("/api/users/password", json={"oldPassword": "a", "newPassword": "bbbbbb"})
        assert response.status_code == 401


class TestStats:
    async def test_fresh_user_stats(self, authed_client: AsyncClient):
        stats = (await authed_client.get("/api/users/stats")).json()
        assert stats == {
            "exercisesCompleted": 0,
            "totalDuration": 0,
            "currentStreak": 0,
            "longestStreak": 0,
            "averageCraving": 0,
            "lastActivityDate": None,
            "points": 0,
            "level": 1,
            "pointsIntoLevel": 0,
            "pointsForLevel": 100,
        }

    async def test_no_badges_yet(self, authed_client: AsyncClient):
        assert (await authed_client.get("/api/users/badges")).json() == []


class TestAdmin:
    async def test_patient_cannot_list_users(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/admin/users")
        assert response.status_code == 403
        assert response.json()["message"] == "Accès administrateur requis"

    async def test_admin_lists_users_with_stats(self, client: AsyncClient):
        await register(client)
        await client.post("/api/auth/logout")
        await register(client, email=ADMIN_EMAIL, password="admin-pass", role="admin")

        response = await client.get("/api/admin/users")
        assert response.status_code == 200
        users = response.json()
        assert {u["email"] for u in users} == {"a@b.com", ADMIN_EMAIL}
        assert all(u["stats"]["level"] == 1 for u in users)
        assert all("password" not in u for u in users)

    async def test_admin_deletes_user(self, client: AsyncClient):
        patient_id = (await register(client)).json()["user"]["id"]
        patient_cookie = client.cookies[get_settings().session_cookie_name]
        client.cookies.clear()
        await register(client, email=ADMIN_EMAIL, password="admin-pass", role="admin")

        response = await client.delete(f"/api/admin/users/{patient_id}")
        assert response.status_code == 200
        assert response.json()["message"] == "Utilisateur supprimé avec succès"

        response = await client.delete(f"/api/admin/users/{patient_id}")
        assert response.status_code == 404

        # The deleted user's session is treated as unauthenticated
        client.cookies.clear()
        client.cookies.set(get_settings().session_cookie_name, patient_cookie)
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"user": None, "message": "Session non valide"}
