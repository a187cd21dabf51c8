import pytest
from httpx import AsyncClient
from fastapi import status

from salestrack.models.auth.user import User
from salestrack.schemas.goals.monthly_planning_schema import MonthlyPlanningSave
from salestrack.services.goals.goal_service import GoalService
from salestrack.services.planning.monthly_planning_service import MonthlyPlanningService

URL = "/api/v1/admin/monthly-planning"

@pytest.mark.asyncio
class TestMonthlyPlanning:
    """Monthly planning for a leader and their direct partners"""

    async def _missed_april(self, client: AsyncClient, leader_headers: dict):
        # 5 of 10 FA in April
        await client.put("/api/v1/goals", json={"period": "monthly", "period_start": "2025-04-01",
                                                "targets": {"fa": 10}}, headers=leader_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-04-10", "fa": 5}, headers=leader_headers)

    async def test_planning_view(self, client: AsyncClient, leader_headers: dict):
        await self._missed_april(client, leader_headers)

        response = await client.get(URL, params={"month": "2025-05"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()["data"]
        assert data["current_month"] == "2025-05"
        assert data["previous_month"] == "2025-04"
        fa = data["previous_month_mirror"][0]
        assert fa["metric"] == "fa"
        assert fa["percentage"] == 50.0
        assert len(data["validation_messages"]) == 1
        assert "50%" in data["validation_messages"][0]
        assert "Recommendations" in data["focus_areas"]

    async def test_direct_partners(self, client: AsyncClient, leader_headers: dict,
                                   advisor_headers: dict, seed: dict):
        """Test FK monthly goals are a twelfth of the yearly FK goals"""
        await client.put("/api/v1/goals", json={"user_id": seed["advisor_id"], "period": "yearly",
                                                "period_start": "2025-01-01", "author": "fk",
                                                "targets": {"fa": 120}}, headers=leader_headers)
        await client.put("/api/v1/goals", json={"period": "monthly", "period_start": "2025-05-01",
                                                "targets": {"fa": 15}}, headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-05-02", "fa": 4, "tiv_invitations": 2},
                          headers=advisor_headers)

        response = await client.get(URL, params={"month": "2025-05"}, headers=leader_headers)
        partners = response.json()["data"]["direct_partners"]
        assert [row["full_name"] for row in partners] == ["Alex Advisor", "Olga Other"]

        row = partners[0]
        assert row["fk_goals"]["fa"] == 10
        assert row["self_goals"]["fa"] == 15
        assert row["kpis"]["fa"] == {"self_target": 15, "fk_target": 10}
        assert row["current_month_actual"]["fa"] == 4
        assert row["quotas"]["tiv_per_fa"] == 0.5
        assert row["delta"] == -33
        assert row["color"] == "yellow"

    async def test_missed_month_requires_reason(self, client: AsyncClient, leader_headers: dict):
        await self._missed_april(client, leader_headers)
        payload = {"month": "2025-05", "goals": {"fa": 10}}

        response = await client.post(URL, json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        payload["previous_month_missed_reason"] = "Two weeks of holiday"
        payload["focus_area"] = "TIV"
        response = await client.post(URL, json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()["data"]
        assert data["own_goals"]["fa"] == 10
        assert data["previous_month_missed_reason"] == "Two weeks of holiday"
        assert data["focus_area"] == "TIV"

    async def test_target_increase_requires_reason(self, client: AsyncClient, leader_headers: dict):
        """Test raising FA from 10 to 20 needs a justification"""
        await self._missed_april(client, leader_headers)
        payload = {"month": "2025-05", "goals": {"fa": 20}, "previous_month_missed_reason": "Holiday"}

        response = await client.post(URL, json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert "100%" in response.json()["detail"]

        payload["target_increase_reason"] = "New market"
        response = await client.post(URL, json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK

    async def test_invalid_input(self, client: AsyncClient, leader_headers: dict):
        response = await client.get(URL, params={"month": "2025-13"}, headers=leader_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = await client.post(URL, json={"month": "2025-05", "focus_area": "Golf"}, headers=leader_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_advisor_is_forbidden(self, client: AsyncClient, advisor_headers: dict):
        response = await client.get(URL, headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_failed_write_is_reraised(self, db_session, seed: dict, monkeypatch):
        """Test a database error surfaces unchanged after the rollback"""
        async def failing_save(*args, **kwargs):
            raise RuntimeError("disk full")

        monkeypatch.setattr(GoalService, "save_goal_set", failing_save)
        leader = await db_session.get(User, seed["leader_id"])

        with pytest.raises(RuntimeError, match="disk full"):
            await MonthlyPlanningService(db_session).save_planning(
                leader, MonthlyPlanningSave(month="2025-05", goals={"fa": 1})
            )
