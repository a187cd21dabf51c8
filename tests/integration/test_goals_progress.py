import pytest
from httpx import AsyncClient
from fastapi import status

from tests.conftest import auth_headers_for

@pytest.mark.asyncio
class TestGoals:
    """Goal set upsert and permissions"""

    async def test_save_and_read_self_goals(self, client: AsyncClient, advisor_headers: dict, seed: dict):
        """Test saving weekly self goals normalises the period start to Monday"""
        payload = {"period": "weekly", "period_start": "2025-03-06", "targets": {"fa": 4, "recommendations": 8}}

        response = await client.put("/api/v1/goals", json=payload, headers=advisor_headers)
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["user_id"] == seed["advisor_id"]
        assert data["period_start"] == "2025-03-03"
        assert data["targets"]["fa"] == 4
        assert data["targets"]["eh"] == 0

        response = await client.get(
            "/api/v1/goals", params={"period": "weekly", "period_start": "2025-03-04"}, headers=advisor_headers
        )
        assert response.json()["targets"]["recommendations"] == 8

    async def test_saving_again_replaces_targets(self, client: AsyncClient, advisor_headers: dict):
        """Test that metrics left out of a later save are removed"""
        base = {"period": "monthly", "period_start": "2025-03-01"}
        await client.put("/api/v1/goals", json={**base, "targets": {"fa": 10, "eh": 500}}, headers=advisor_headers)
        response = await client.put("/api/v1/goals", json={**base, "targets": {"fa": 12}}, headers=advisor_headers)

        targets = response.json()["targets"]
        assert targets["fa"] == 12
        assert targets["eh"] == 0

    async def test_missing_goal_set_is_empty(self, client: AsyncClient, advisor_headers: dict):
        response = await client.get(
            "/api/v1/goals", params={"period": "yearly", "period_start": "2025-01-01"}, headers=advisor_headers
        )
        assert response.status_code == status.HTTP_200_OK
        assert all(value == 0 for value in response.json()["targets"].values())

    async def test_fk_goals_only_by_direct_leader(self, client: AsyncClient, advisor_headers: dict,
                                                 leader_headers: dict, seed: dict):
        """Test FK goals can be written by the leader but not by the advisor"""
        payload = {"user_id": seed["advisor_id"], "period": "yearly", "period_start": "2025-01-01",
                   "author": "fk", "targets": {"fa": 160}}

        response = await client.put("/api/v1/goals", json=payload, headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

        response = await client.put("/api/v1/goals", json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["author"] == "fk"

    async def test_leader_cannot_write_self_goals_of_partner(self, client: AsyncClient, leader_headers: dict, seed: dict):
        payload = {"user_id": seed["advisor_id"], "period": "monthly", "period_start": "2025-03-01",
                   "targets": {"fa": 10}}
        response = await client.put("/api/v1/goals", json=payload, headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestProgress:
    """Progress for a user and a team"""

    async def _week_with_goals(self, client: AsyncClient, headers: dict, fa_target: int, fa_done: list):
        await client.put("/api/v1/goals", json={"period": "weekly", "period_start": "2025-03-03",
                                                "targets": {"fa": fa_target}}, headers=headers)
        for day, fa in enumerate(fa_done, start=3):
            await client.post("/api/v1/daily-entries", json={"entry_date": f"2025-03-0{day}", "fa": fa}, headers=headers)

    async def test_my_weekly_progress(self, client: AsyncClient, advisor_headers: dict):
        """Test 40 of 50 is 80% and green"""
        await self._week_with_goals(client, advisor_headers, 50, [20, 20])

        response = await client.get("/api/v1/progress/me", params={"period": "weekly", "as_of": "2025-03-07"},
                                    headers=advisor_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["start"] == "2025-03-03"
        assert data["end"] == "2025-03-09"
        fa = data["progress"][0]
        assert fa["metric"] == "fa"
        assert fa["achieved"] == 40
        assert fa["percentage"] == 80.0
        assert fa["color_band"] == "green"
        assert data["progress"][1]["color_band"] == "no_target"

    async def test_overachievement_is_uncapped(self, client: AsyncClient, advisor_headers: dict):
        await self._week_with_goals(client, advisor_headers, 10, [15])

        response = await client.get("/api/v1/progress/me", params={"period": "weekly", "as_of": "2025-03-03"},
                                    headers=advisor_headers)
        fa = response.json()["progress"][0]
        assert fa["percentage"] == 150.0
        assert fa["bar_width"] == 100.0

    async def test_team_rollup(self, client: AsyncClient, advisor_headers: dict, leader_headers: dict, seed: dict):
        """Test team totals and targets are member sums"""
        other_headers = auth_headers_for(seed["other_id"])
        await self._week_with_goals(client, advisor_headers, 10, [5])
        await self._week_with_goals(client, other_headers, 30, [15])

        response = await client.get(f"/api/v1/progress/team/{seed['team_id']}",
                                    params={"period": "weekly", "as_of": "2025-03-05"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["team_name"] == "Nord"
        assert data["totals"]["fa"] == 20
        assert data["targets"]["fa"] == 40
        assert data["progress"][0]["percentage"] == 50.0
        assert len(data["members"]) == 3

    async def test_team_progress_requires_leader(self, client: AsyncClient, advisor_headers: dict, seed: dict):
        response = await client.get(f"/api/v1/progress/team/{seed['team_id']}", headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    async def test_unknown_team(self, client: AsyncClient, leader_headers: dict):
        response = await client.get("/api/v1/progress/team/999", headers=leader_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_leader_views_partner_progress(self, client: AsyncClient, advisor_headers: dict,
                                                 leader_headers: dict, seed: dict):
        await self._week_with_goals(client, advisor_headers, 10, [5])

        response = await client.get(f"/api/v1/progress/users/{seed['advisor_id']}",
                                    params={"period": "weekly", "as_of": "2025-03-03"}, headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["progress"][0]["percentage"] == 50.0

        response = await client.get(f"/api/v1/progress/users/{seed['leader_id']}", headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestWeeklyReview:
    """End-of-week review of the own weekly goals"""

    URL = "/api/v1/goals/weekly/review"

    async def _week(self, client: AsyncClient, headers: dict):
        await client.put("/api/v1/goals", json={"period": "weekly", "period_start": "2025-03-03",
                                                "targets": {"fa": 4}}, headers=headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-04", "fa": 2}, headers=headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-06", "fa": 3}, headers=headers)

    async def test_review_week(self, client: AsyncClient, advisor_headers: dict, leader_headers: dict, seed: dict):
        """Test any day of the week resolves to its Monday and the review sits next to the actuals"""
        await self._week(client, advisor_headers)

        response = await client.post(self.URL, json={
            "week_start": "2025-03-07", "goal_achieved": True,
            "completion_notes": "Five FA", "next_week_focus": "TIV invitations",
        }, headers=advisor_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["week_start"] == "2025-03-03"
        assert data["week_end"] == "2025-03-09"
        assert data["targets"]["fa"] == 4
        assert data["totals"]["fa"] == 5
        assert data["targets_met"] is True
        assert data["is_reviewed"] is True
        assert data["goal_achieved"] is True
        assert data["completion_notes"] == "Five FA"

        response = await client.post(self.URL, json={"week_start": "2025-03-03", "goal_achieved": False},
                                     headers=advisor_headers)
        assert response.json()["goal_achieved"] is False
        assert response.json()["next_week_focus"] is None

        response = await client.get(self.URL, params={"week_start": "2025-03-05", "user_id": seed["advisor_id"]},
                                    headers=leader_headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_reviewed"] is True
        assert response.json()["goal_achieved"] is False

    async def test_unreviewed_week(self, client: AsyncClient, advisor_headers: dict):
        await client.put("/api/v1/goals", json={"period": "weekly", "period_start": "2025-03-03",
                                                "targets": {"fa": 4}}, headers=advisor_headers)

        response = await client.get(self.URL, params={"week_start": "2025-03-03"}, headers=advisor_headers)
        data = response.json()
        assert data["is_reviewed"] is False
        assert data["goal_achieved"] is None
        assert data["targets_met"] is False

    async def test_week_without_goals(self, client: AsyncClient, advisor_headers: dict):
        response = await client.post(self.URL, json={"week_start": "2025-03-03", "goal_achieved": True},
                                     headers=advisor_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    async def test_other_partner_is_forbidden(self, client: AsyncClient, advisor_headers: dict, seed: dict):
        response = await client.get(self.URL, params={"week_start": "2025-03-03", "user_id": seed["other_id"]},
                                    headers=advisor_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
class TestTeamRadar:
    """All teams side by side"""

    URL = "/api/v1/admin/team-radar"

    async def _prepare(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict, seed: dict):
        other_headers = auth_headers_for(seed["other_id"])
        await client.post("/api/v1/teams", json={"name": "Sued"}, headers=admin_headers)
        for headers, target in ((advisor_headers, 4), (other_headers, 6)):
            await client.put("/api/v1/goals", json={"period": "weekly", "period_start": "2025-03-03",
                                                    "targets": {"fa": target}}, headers=headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-03", "fa": 1,
                                                         "help_needed": "Pricing"}, headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-04", "fa": 1,
                                                         "help_needed": "Objection handling"}, headers=advisor_headers)
        await client.post("/api/v1/daily-entries", json={"entry_date": "2025-03-05", "fa": 3}, headers=other_headers)

    async def test_weekly_radar(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict, seed: dict):
        await self._prepare(client, admin_headers, advisor_headers, seed)

        response = await client.get(self.URL, params={"timeframe": "weekly", "as_of": "2025-03-06"},
                                    headers=admin_headers)
        assert response.status_code == status.HTTP_200_OK

        data = response.json()
        assert data["start"] == "2025-03-03"
        assert data["end"] == "2025-03-09"
        assert [team["team_name"] for team in data["teams"]] == ["Nord", "Sued"]

        nord, sued = data["teams"]
        assert nord["totals"]["fa"] == 5
        assert nord["targets"]["fa"] == 10
        assert nord["help_requests"] == [{"user_id": seed["advisor_id"], "full_name": "Alex Advisor",
                                          "entry_date": "2025-03-04", "help_needed": "Objection handling"}]
        assert sued["totals"]["fa"] == 0
        assert sued["members"] == []

        assert data["overall_totals"]["fa"] == 5
        assert data["overall_targets"]["fa"] == 10
        assert data["overall_progress"][0]["percentage"] == 50.0

    async def test_monthly_radar(self, client: AsyncClient, admin_headers: dict, advisor_headers: dict, seed: dict):
        """Test weekly goals do not count as monthly targets"""
        await self._prepare(client, admin_headers, advisor_headers, seed)

        response = await client.get(self.URL, params={"timeframe": "monthly", "as_of": "2025-03-06"},
                                    headers=admin_headers)
        data = response.json()
        assert data["start"] == "2025-03-01"
        assert data["end"] == "2025-03-31"
        assert data["overall_totals"]["fa"] == 5
        assert data["overall_targets"]["fa"] == 0
        assert data["overall_progress"][0]["color_band"] == "no_target"

    async def test_unsupported_timeframe(self, client: AsyncClient, admin_headers: dict):
        response = await client.get(self.URL, params={"timeframe": "yearly"}, headers=admin_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    async def test_admin_only(self, client: AsyncClient, leader_headers: dict):
        response = await client.get(self.URL, headers=leader_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
