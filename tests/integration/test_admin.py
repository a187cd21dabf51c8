from datetime import date

import pytest
from httpx import AsyncClient
from fastapi import status

CONFIG_URL = "/api/v1/admin/config"

@pytest.mark.asyncio
class TestConfig:
    """Threshold configuration"""

    async def test_defaults(self, client: AsyncClient, admin_headers: dict):
        response = await client.get(CONFIG_URL, headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        body = response.json()
        assert body["data"]["progress_yellow_threshold"] == 30
        assert body["data"]["progress_green_threshold"] == 80
        assert body["data"]["progress_diamond_threshold"] is None
        assert body["data"]["strength_at"] == 100
        assert body["data"]["min_tiv_per_fa"] == 0.4
        assert body["data"] == body["defaults"]

    async def test_override_applies_to_next_request(self, client: AsyncClient, admin_headers: dict,
                                                    advisor_headers: dict):
        """Test 35% moves from yellow to red once yellow starts at 40"""
        await client.put("/api/v1/goals", json={"period": "weekly", "period_start": "2025-03-03",
                                                "targets": {"fa": 20}}, headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-04", "fa": 7}, headers=advisor_headers)
        params = {"period": "weekly", "as_of": "2025-03-04"}

        response = await client.get("/api/v1/progress/me", params=params, headers=advisor_headers)
        assert response.json()["progress"][0]["color_band"] == "yellow"

        response = await client.put(CONFIG_URL, json={"configs": [{"key": "progress_yellow_threshold", "value": "40"}]},
                                    headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["progress_yellow_threshold"] == 40

        response = await client.get("/api/v1/progress/me", params=params, headers=advisor_headers)
        assert response.json()["progress"][0]["color_band"] == "red"

        response = await client.delete(f"{CONFIG_URL}/progress_yellow_threshold", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["progress_yellow_threshold"] == 30

        response = await client.delete(f"{CONFIG_URL}/progress_yellow_threshold", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_diamond_band(self, client: AsyncClient, admin_headers: dict):
        response = await client.put(CONFIG_URL, json={"configs": [{"key": "progress_diamond_threshold", "value": 120}]},
                                    headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["progress_diamond_threshold"] == 120

    @pytest.mark.parametrize("entry", [
        {"key": "progress_yellow_threshold", "value": 90},
        {"key": "progress_yellow_threshold", "value": -5},
        {"key": "progress_yellow_threshold", "value": "abc"},
        {"key": "lock_days", "value": 0},
        {"key": "weakness_below", "value": 120},
        {"key": "unknown_setting", "value": 1},
    ])
    async def test_invalid_values_are_rejected(self, client: AsyncClient, admin_headers: dict, entry: dict):
        response = await client.put(CONFIG_URL, json={"configs": [entry]}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.get(CONFIG_URL, headers=admin_headers)
        assert response.json()["data"] == response.json()["defaults"]

    async def test_admin_only(self, client: AsyncClient, leader_headers: dict):
        response = await client.get(CONFIG_URL, headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestIntegrityCheck:
    """Data integrity report"""

    async def test_reports_issues(self, client: AsyncClient, admin_headers: dict,
                                  advisor_headers: dict, leader_headers: dict):
        today = date.today().isoformat()
        await client.post("/api/v1/daily-entries", json={"entry_date": today, "fa": 0, "tgs_registrations": 2},
                          headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": today, "fa": 1}, headers=leader_headers)

        team = await client.post("/api/v1/teams", json={"name": "Sued"}, headers=admin_headers)
        await client.post("/api/v1/users", json={"email": "new@example.com", "full_name": "Nina New",
                                                 "team_id": team.json()["id"]}, headers=admin_headers)

        response = await client.get("/api/v1/admin/integrity-check", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        issues = {issue["type"]: issue for issue in response.json()["data"]}
        assert set(issues) == {"missing_goals", "missing_entries", "broken_quotas", "missing_leader"}
        assert issues["missing_goals"]["severity"] == "high"
        assert "Alex Advisor" in issues["missing_goals"]["affected_users"]
        assert "Alex Advisor" not in issues["missing_entries"]["affected_users"]
        assert issues["broken_quotas"]["affected_users"] == [f"Alex Advisor ({today})"]
        assert issues["missing_leader"]["affected_users"] == ["Sued"]

    async def test_unrealistic_yearly_goals(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict):
        await client.put("/api/v1/goals", json={"period": "yearly", "period_start": "2025-01-01",
                                                "targets": {"fa": 100, "eh": 1000}}, headers=advisor_headers)

        response = await client.get("/api/v1/admin/integrity-check", headers=admin_headers)
        issues = {issue["type"]: issue for issue in response.json()["data"]}
        assert issues["inconsistent_data"]["severity"] == "low"
        assert issues["inconsistent_data"]["affected_users"] == ["Alex Advisor (self: EH/FA 10.0)"]

    async def test_admin_only(self, client: AsyncClient, leader_headers: dict):
        response = await client.get("/api/v1/admin/integrity-check", headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
