import pytest
from httpx import AsyncClient
from fastapi import status

from tests.conftest import auth_headers_for

@pytest.mark.asyncio
class TestUsers:
    """User administration"""

    async def test_get_me(self, client: AsyncClient, advisor_headers: dict, seed: dict):
        response = await client.get("/api/v1/users/me", headers=advisor_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["email"] == "advisor@example.com"
        assert data["role"] == "advisor"
        assert data["parent_leader_id"] == seed["leader_id"]

    async def test_create_user(self, client: AsyncClient, admin_headers: dict, seed: dict):
        user = {"email": "new@example.com", "full_name": "Nina New", "team_id": seed["team_id"],
                "parent_leader_id": seed["leader_id"]}

        response = await client.post("/api/v1/users", json=user, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_active"] is True
        new_id = response.json()["id"]

        response = await client.post("/api/v1/users", json=user, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.get("/api/v1/users/me", headers=auth_headers_for(new_id))
        assert response.json()["full_name"] == "Nina New"

    async def test_create_user_requires_admin(self, client: AsyncClient, leader_headers: dict):
        response = await client.post("/api/v1/users", json={"email": "x@example.com", "full_name": "Xaver"},
                                     headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_list_users(self, client: AsyncClient, leader_headers: dict, advisor_headers: dict):
        response = await client.get("/api/v1/users", params={"role": "advisor"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 2
        assert len(data["data"]) == 2

        response = await client.get("/api/v1/users", headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_update_user(self, client: AsyncClient, admin_headers: dict, seed: dict):
        url = f"/api/v1/users/{seed['advisor_id']}"

        response = await client.patch(url, json={"is_team_leader": True}, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_team_leader"] is True

        response = await client.patch(url, json={"parent_leader_id": seed["advisor_id"]}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.patch(url, json={"team_id": 999}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.patch("/api/v1/users/999", json={"is_active": False}, headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_inactive_user_is_rejected(self, client: AsyncClient, admin_headers: dict,
                                             advisor_headers: dict, seed: dict):
        await client.patch(f"/api/v1/users/{seed['advisor_id']}", json={"is_active": False}, headers=admin_headers)

        response = await client.get("/api/v1/users/me", headers=advisor_headers)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
class TestTeams:
    """Teams and team averages"""

    async def test_create_and_list(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict):
        response = await client.post("/api/v1/teams", json={"name": "Sued"}, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "Sued"

        response = await client.post("/api/v1/teams", json={"name": "Sued"}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.post("/api/v1/teams", json={"name": "Ost"}, headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.get("/api/v1/teams", headers=advisor_headers)
        assert sorted(team["name"] for team in response.json()) == ["Nord", "Sued"]

    async def test_team_averages(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict,
                                 leader_headers: dict):
        """Test averages are per daily entry over the 30 and 90 day windows"""
        await client.post("/api/v1/teams", json={"name": "Sued"}, headers=admin_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-04", "fa": 2, "recommendations": 2},
                          headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-05", "fa": 4, "recommendations": 2},
                          headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-01-10", "fa": 9},
                          headers=advisor_headers)

        response = await client.get("/api/v1/teams/averages", params={"as_of": "2025-03-10"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK

        teams = {team["team_name"]: team for team in response.json()}
        nord = teams["Nord"]
        assert nord["member_count"] == 3
        assert nord["entry_count"] == 3
        assert nord["metrics"]["fa"] == {"avg_short": 3.0, "avg_long": 5.0}
        assert nord["quotas"]["recommendations_per_fa"]["avg_short"] == 0.75

        assert teams["Sued"]["member_count"] == 0
        assert teams["Sued"]["metrics"]["fa"]["avg_short"] == 0

    async def test_team_averages_require_leader(self, client: AsyncClient, advisor_headers: dict):
        response = await client.get("/api/v1/teams/averages", headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
