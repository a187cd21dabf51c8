import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import ValidationError
from salestrack.engine import combine_totals, progress_for_goals
from salestrack.engine.types import DateRange, GoalSet, ThresholdConfig
from salestrack.models.shared.enums import GoalPeriod, MetricKey
from salestrack.services.auth.user_service import UserService
from salestrack.services.dashboard.progress_service import ProgressService, progress_to_dicts, totals_to_dict
from salestrack.services.organization.team_service import TeamService
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import period_range

logger = logging.getLogger(__name__)

RADAR_TIMEFRAMES = (GoalPeriod.WEEKLY, GoalPeriod.MONTHLY)


def _by_metric(values: Mapping[str, Any]) -> Dict[MetricKey, Any]:
    return {metric: values.get(metric.value, 0) for metric in MetricKey}


class TeamRadarService:
    """Every active team's totals against its summed targets, plus the open help requests."""

    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.progress = ProgressService(db, self.config)
        self.entries = DailyEntryService(db)

    async def _help_requests(self, team_id: int, window: DateRange) -> List[Dict[str, Any]]:
        """Latest non-empty help request per member within the period."""
        members = await UserService(self.db).get_team_members(team_id)
        names = {member.id: member.full_name for member in members}
        records = await self.entries.get_records(list(names), window)

        requests = {}
        for record in records:
            if record.user_id in requests or not (record.help_needed or "").strip():
                continue
            requests[record.user_id] = {
                "user_id": record.user_id,
                "full_name": names[record.user_id],
                "entry_date": record.entry_date,
                "help_needed": record.help_needed,
            }
        return sorted(requests.values(), key=lambda item: item["full_name"])

    async def get_radar(self, timeframe: GoalPeriod = GoalPeriod.WEEKLY, as_of: Optional[date] = None) -> Dict[str, Any]:
        if timeframe not in RADAR_TIMEFRAMES:
            raise ValidationError(f"Team radar supports weekly or monthly, got {timeframe.value}")
        as_of = as_of or date.today()
        window = period_range(timeframe, as_of)

        teams = []
        for team in await TeamService(self.db).get_teams(is_active=True):
            row = await self.progress.get_team_progress(team.id, timeframe, as_of)
            row["help_requests"] = await self._help_requests(team.id, window)
            teams.append(row)

        overall_totals = combine_totals(_by_metric(team["totals"]) for team in teams)
        overall_targets = combine_totals(_by_metric(team["targets"]) for team in teams)
        overall_goals = GoalSet(period=timeframe, targets=overall_targets)

        logger.debug(f"Team radar {timeframe.value} {window.start} - {window.end}: {len(teams)} team(s)")
        return {
            "timeframe": timeframe,
            "start": window.start,
            "end": window.end,
            "teams": teams,
            "overall_totals": totals_to_dict(overall_totals),
            "overall_targets": totals_to_dict(overall_targets),
            "overall_progress": progress_to_dicts(
                progress_for_goals(overall_totals, overall_goals, self.config.progress)
            ),
        }
