import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.engine import aggregate, aggregate_by_user, combine_totals, progress_for_goals
from salestrack.engine.types import GoalSet, ProgressResult, ThresholdConfig, empty_totals
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey
from salestrack.services.auth.user_service import UserService
from salestrack.services.goals.goal_service import GoalService
from salestrack.services.organization.team_service import TeamService
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import period_range

logger = logging.getLogger(__name__)


def totals_to_dict(totals: Mapping[MetricKey, Any]) -> Dict[str, float]:
    return {metric.value: totals.get(metric, 0) for metric in MetricKey}


def progress_to_dicts(results: Iterable[ProgressResult]) -> List[Dict[str, Any]]:
    return [
        {
            "metric": result.metric,
            "achieved": result.achieved,
            "target": result.target,
            "percentage": round(result.percentage, 2),
            "bar_width": round(result.bar_width, 2),
            "color_band": result.color_band,
        }
        for result in results
    ]


class ProgressService:
    """Period progress for one user or a whole team, recomputed on every call."""

    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.entries = DailyEntryService(db)
        self.goals = GoalService(db)

    async def get_user_progress(
        self,
        user_id: int,
        period: GoalPeriod,
        as_of: Optional[date] = None,
        author: GoalAuthor = GoalAuthor.SELF
    ) -> Dict[str, Any]:
        date_range = period_range(period, as_of or date.today())
        records = await self.entries.get_user_records(user_id, date_range)
        totals = aggregate(records, date_range)
        goals = await self.goals.get_goal_set(user_id, period, date_range.start, author)

        logger.debug(f"Progress for user {user_id}: {period.value} {date_range.start} - {date_range.end}")
        return {
            "user_id": user_id,
            "period": period,
            "start": date_range.start,
            "end": date_range.end,
            "totals": totals_to_dict(totals),
            "progress": progress_to_dicts(progress_for_goals(totals, goals, self.config.progress)),
        }

    async def get_team_progress(
        self,
        team_id: int,
        period: GoalPeriod,
        as_of: Optional[date] = None
    ) -> Dict[str, Any]:
        """Team totals and targets are the pointwise sums over the active members."""
        team = await TeamService(self.db).get_team_or_404(team_id)
        members: List[User] = await UserService(self.db).get_team_members(team_id)
        date_range = period_range(period, as_of or date.today())
        member_ids = [member.id for member in members]

        records = await self.entries.get_records(member_ids, date_range)
        totals_by_user = aggregate_by_user(records, date_range)
        goals_by_user = await self.goals.get_goal_sets_for_users(member_ids, period, date_range.start)

        member_rows = []
        for member in members:
            member_totals = totals_by_user.get(member.id, empty_totals())
            member_goals = goals_by_user[member.id]
            member_rows.append({
                "user_id": member.id,
                "full_name": member.full_name,
                "totals": totals_to_dict(member_totals),
                "progress": progress_to_dicts(progress_for_goals(member_totals, member_goals, self.config.progress)),
            })

        team_totals = combine_totals(totals_by_user.get(member_id, empty_totals()) for member_id in member_ids)
        team_targets = combine_totals(
            {metric: goals.target(metric) for metric in MetricKey} for goals in goals_by_user.values()
        )
        team_goals = GoalSet(period=period, targets=team_targets)

        return {
            "team_id": team.id,
            "team_name": team.name,
            "period": period,
            "start": date_range.start,
            "end": date_range.end,
            "totals": totals_to_dict(team_totals),
            "targets": totals_to_dict(team_targets),
            "progress": progress_to_dicts(progress_for_goals(team_totals, team_goals, self.config.progress)),
            "members": member_rows,
        }
