from datetime import date

import pytest
from httpx import AsyncClient
from fastapi import status

from salestrack.models.auth.user import User
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey
from salestrack.services.alerts.alert_service import AlertService
from salestrack.services.goals.goal_service import GoalService

SCAN_DAY = date(2025, 10, 15)

async def _seed_deviating_goals(session_maker, seed: dict) -> dict:
    """Self 100 vs FK 160 FA for the advisor, no activity, then one scan"""
    async with session_maker() as session:
        goals = GoalService(session)
        await goals.save_goal_set(seed["advisor_id"], GoalPeriod.YEARLY, date(2025, 1, 1), GoalAuthor.SELF,
                                  {MetricKey.FA: 100}, seed["advisor_id"])
        await goals.save_goal_set(seed["advisor_id"], GoalPeriod.YEARLY, date(2025, 1, 1), GoalAuthor.MANAGER,
                                  {MetricKey.FA: 160}, seed["leader_id"])
        return await AlertService(session).scan_goal_deviations(SCAN_DAY)

@pytest.mark.asyncio
class TestAlerts:
    """Deviation alerts for leaders"""

    async def test_scan_creates_alerts(self, session_maker, seed: dict):
        """Test a red deviation and an off-track FA path both raise alerts"""
        result = await _seed_deviating_goals(session_maker, seed)
        assert result == {"scanned_users": 2, "created": 2}

    async def test_open_alerts_are_not_duplicated(self, session_maker, seed: dict):
        await _seed_deviating_goals(session_maker, seed)

        async with session_maker() as session:
            result = await AlertService(session).scan_goal_deviations(SCAN_DAY)
        assert result["created"] == 0

    async def test_overlapping_cycles_alert_separately(self, session_maker, seed: dict):
        """Test the same deviation in both open cycles raises one alert per cycle"""
        await _seed_deviating_goals(session_maker, seed)
        async with session_maker() as session:
            goals = GoalService(session)
            await goals.save_goal_set(seed["advisor_id"], GoalPeriod.YEARLY, date(2025, 7, 1), GoalAuthor.SELF,
                                      {MetricKey.FA: 100}, seed["advisor_id"])
            await goals.save_goal_set(seed["advisor_id"], GoalPeriod.YEARLY, date(2025, 7, 1), GoalAuthor.MANAGER,
                                      {MetricKey.FA: 160}, seed["leader_id"])
            result = await AlertService(session).scan_goal_deviations(SCAN_DAY)
            assert result["created"] == 2

            alerts = await AlertService(session).get_alerts(await session.get(User, seed["admin_id"]))
        by_cycle = {}
        for alert in alerts:
            by_cycle.setdefault(alert.cycle_label, set()).add(alert.alert_type)
        assert by_cycle == {
            "bis 30.12.2025": {"GOAL_DEVIATION", "OFF_TRACK"},
            "bis 30.06.2026": {"GOAL_DEVIATION", "OFF_TRACK"},
        }

        async with session_maker() as session:
            result = await AlertService(session).scan_goal_deviations(SCAN_DAY)
        assert result["created"] == 0

    async def test_list_and_resolve(self, client: AsyncClient, session_maker, seed: dict,
                                    leader_headers: dict, advisor_headers: dict, admin_headers: dict):
        await _seed_deviating_goals(session_maker, seed)

        response = await client.get("/api/v1/alerts", headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        alerts = response.json()
        assert {alert["alert_type"] for alert in alerts} == {"GOAL_DEVIATION", "OFF_TRACK"}
        assert all(alert["entity_id"] == seed["advisor_id"] for alert in alerts)
        deviation = next(alert for alert in alerts if alert["alert_type"] == "GOAL_DEVIATION")
        assert deviation["severity"] == "HIGH"
        assert deviation["metric"] == "fa"
        assert deviation["cycle_label"] == "bis 30.12.2025"

        response = await client.get("/api/v1/alerts", headers=advisor_headers)
        assert response.json() == []

        response = await client.get("/api/v1/alerts", headers=admin_headers)
        assert len(response.json()) == 2

        response = await client.post(f"/api/v1/alerts/{deviation['id']}/resolve", json={}, headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.post(f"/api/v1/alerts/{deviation['id']}/resolve",
                                     json={"resolution_notes": "Goals aligned in 1:1"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_resolved"] is True

        response = await client.get("/api/v1/alerts", headers=leader_headers)
        assert len(response.json()) == 1
        response = await client.get("/api/v1/alerts", params={"include_resolved": True}, headers=leader_headers)
        assert len(response.json()) == 2

        # Resolved alerts no longer suppress a new one
        async with session_maker() as session:
            result = await AlertService(session).scan_goal_deviations(SCAN_DAY)
        assert result["created"] == 1

    async def test_unknown_alert(self, client: AsyncClient, leader_headers: dict):
        response = await client.post("/api/v1/alerts/999/resolve", json={}, headers=leader_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_manual_scan_is_admin_only(self, client: AsyncClient, admin_headers: dict, leader_headers: dict):
        response = await client.post("/api/v1/alerts/scan", headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.post("/api/v1/alerts/scan", headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["scanned_users"] == 2
