import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.config import settings
from salestrack.core.exceptions import NotFoundError, ValidationError
from salestrack.core.logging import log_user_action
from salestrack.engine import aggregate, average_per_entry, compute_quotas
from salestrack.engine.types import DailyRecord
from salestrack.models.organization.team import Team
from salestrack.models.shared.enums import MetricKey
from salestrack.schemas.organization.team_schema import TeamCreate
from salestrack.services.auth.user_service import UserService
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import days_back

logger = logging.getLogger(__name__)


def average_quotas_per_entry(records: List[DailyRecord]) -> Dict[str, float]:
    """Mean of each entry's own quotas (an entry without a denominator counts as 0)."""
    per_entry = [compute_quotas(record.counts) for record in records]
    if not per_entry:
        return compute_quotas({})
    return {
        name: round(math.fsum(quotas[name] for quotas in per_entry) / len(per_entry), 2)
        for name in per_entry[0]
    }


class TeamService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_team(self, team_id: int) -> Optional[Team]:
        result = await self.db.execute(
            select(Team).where(
                Team.id == team_id,
                Team.is_deleted == False
            )
        )
        return result.scalar_one_or_none()

    async def get_team_or_404(self, team_id: int) -> Team:
        team = await self.get_team(team_id)
        if not team:
            raise NotFoundError(f"Team with ID {team_id} not found")
        return team

    async def get_teams(self, is_active: Optional[bool] = None) -> List[Team]:
        conditions = [Team.is_deleted == False]
        if is_active is not None:
            conditions.append(Team.is_active == is_active)
        result = await self.db.execute(select(Team).where(*conditions).order_by(Team.name))
        return list(result.scalars().all())

    async def create_team(self, team_data: TeamCreate, current_user_id: int) -> Team:
        try:
            existing = await self.db.execute(
                select(Team.id).where(Team.name == team_data.name, Team.is_deleted == False).limit(1)
            )
            if existing.scalar_one_or_none() is not None:
                raise ValidationError(f"Team '{team_data.name}' already exists")

            team = Team(**team_data.dict(), is_active=True, created_by=current_user_id)
            self.db.add(team)
            await self.db.commit()
            await self.db.refresh(team)

            log_user_action(current_user_id, "CREATE", "team", team.id)
            return team

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error creating team: {str(e)}")
            raise

    async def get_team_quota_averages(self, team_id: Optional[int], as_of: date, days: int = 30) -> Dict[str, float]:
        """Team quotas over the trailing window, computed from the summed totals."""
        if team_id is None:
            return compute_quotas({})
        members = await UserService(self.db).get_team_members(team_id)
        window = days_back(as_of, days)
        records = await DailyEntryService(self.db).get_records([member.id for member in members], window)
        return compute_quotas(aggregate(records, window))

    async def get_team_averages(self, as_of: Optional[date] = None) -> List[Dict[str, Any]]:
        """Per-entry metric and quota averages over the short and long windows."""
        as_of = as_of or date.today()
        short_window = days_back(as_of, settings.TEAM_AVERAGE_SHORT_DAYS)
        long_window = days_back(as_of, settings.TEAM_AVERAGE_LONG_DAYS)
        user_service = UserService(self.db)
        entry_service = DailyEntryService(self.db)

        averages = []
        for team in await self.get_teams(is_active=True):
            members = await user_service.get_team_members(team.id)
            long_records = await entry_service.get_records([member.id for member in members], long_window)
            short_records = [record for record in long_records if short_window.contains(record.entry_date)]

            avg_short = average_per_entry(short_records, short_window)
            avg_long = average_per_entry(long_records, long_window)
            quota_short = average_quotas_per_entry(short_records)
            quota_long = average_quotas_per_entry(long_records)

            averages.append({
                "team_id": team.id,
                "team_name": team.name,
                "member_count": len(members),
                "entry_count": len(long_records),
                "metrics": {
                    metric.value: {
                        "avg_short": round(avg_short[metric], 2),
                        "avg_long": round(avg_long[metric], 2),
                    }
                    for metric in MetricKey
                },
                "quotas": {
                    name: {"avg_short": quota_short[name], "avg_long": quota_long[name]}
                    for name in quota_long
                },
            })
        return averages
