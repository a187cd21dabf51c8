import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.models.auth.user import User
from salestrack.models.goals.goal_set import GoalSetRecord
from salestrack.models.organization.team import Team
from salestrack.models.shared.enums import GoalPeriod, MetricKey
from salestrack.services.auth.user_service import UserService
from salestrack.services.goals.goal_service import record_to_goal_set
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import days_back

logger = logging.getLogger(__name__)

EH_PER_FA_RANGE = (50, 200)


def _issue(issue_type: str, severity: str, description: str, affected: List[str], action: str) -> Dict[str, Any]:
    return {
        "type": issue_type,
        "severity": severity,
        "description": description,
        "affected_users": affected,
        "suggested_action": action,
    }


class IntegrityService:
    """Read-only sanity checks over goals, entries and team structure."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        today = today or date.today()
        users = await UserService(self.db).get_active_users()
        names = {user.id: user.full_name for user in users}
        window = days_back(today, 30)
        records = await DailyEntryService(self.db).get_records(names.keys(), window)

        issues = []

        goal_owners = set(await self.db.scalars(
            select(GoalSetRecord.user_id).where(GoalSetRecord.is_deleted == False).distinct()
        ))
        without_goals = [names[user_id] for user_id in names if user_id not in goal_owners]
        if without_goals:
            issues.append(_issue(
                "missing_goals", "high",
                f"{len(without_goals)} user(s) have no goals",
                without_goals,
                "Set goals in annual or monthly planning",
            ))

        with_entries = {record.user_id for record in records}
        without_entries = [names[user_id] for user_id in names if user_id not in with_entries]
        if without_entries:
            issues.append(_issue(
                "missing_entries", "medium",
                f"{len(without_entries)} user(s) have no daily entries in the last 30 days",
                without_entries,
                "Remind the users to record their daily activity",
            ))

        broken = []
        for record in records:
            counts_without_fa = record.value(MetricKey.FA) == 0 and any(
                record.value(metric) > 0 for metric in (
                    MetricKey.NEW_APPOINTMENTS, MetricKey.RECOMMENDATIONS,
                    MetricKey.TIV_INVITATIONS, MetricKey.BAV_CHECKS,
                )
            )
            tgs_without_tiv = record.value(MetricKey.TIV_INVITATIONS) == 0 and record.value(MetricKey.TGS_REGISTRATIONS) > 0
            if counts_without_fa or tgs_without_tiv:
                broken.append(f"{names[record.user_id]} ({record.entry_date.isoformat()})")
        if broken:
            issues.append(_issue(
                "broken_quotas", "medium",
                f"{len(broken)} daily entr(ies) report follow-up activity without its base activity",
                broken,
                "Review the entries; quotas cannot be computed from them",
            ))

        yearly = await self.db.scalars(
            select(GoalSetRecord).where(
                GoalSetRecord.period == GoalPeriod.YEARLY,
                GoalSetRecord.user_id.in_(list(names)),
                GoalSetRecord.is_deleted == False
            )
        )
        unrealistic = []
        for record in yearly.all():
            goals = record_to_goal_set(record, record.period, record.author)
            fa, eh = goals.target(MetricKey.FA), goals.target(MetricKey.EH)
            if fa > 0 and eh > 0 and not EH_PER_FA_RANGE[0] <= eh / fa <= EH_PER_FA_RANGE[1]:
                unrealistic.append(f"{names[record.user_id]} ({record.author.value}: EH/FA {eh / fa:.1f})")
        if unrealistic:
            issues.append(_issue(
                "inconsistent_data", "low",
                "Yearly goals with an unrealistic EH per FA ratio",
                unrealistic,
                f"Check the goals; EH per FA is expected between {EH_PER_FA_RANGE[0]} and {EH_PER_FA_RANGE[1]}",
            ))

        teams = await self.db.scalars(select(Team).where(Team.is_active == True, Team.is_deleted == False))
        leaderless = []
        for team in teams.all():
            members = [user for user in users if user.team_id == team.id]
            if members and not any(user.is_team_leader for user in members):
                leaderless.append(team.name)
        if leaderless:
            issues.append(_issue(
                "missing_leader", "high",
                f"{len(leaderless)} team(s) have no team leader",
                leaderless,
                "Assign a team leader",
            ))

        logger.info(f"Integrity check found {len(issues)} issue type(s)")
        return issues
