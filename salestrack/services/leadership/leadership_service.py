import logging
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import PermissionDeniedError
from salestrack.core.logging import log_user_action
from salestrack.engine import (
    aggregate, analyze_quotas, check_consistency, classify_progress, compute_quotas,
    progress_for_goals, top_deviations
)
from salestrack.engine.insights import (
    AGENDA_RULES, PATTERN_RULES, QUOTA_HEURISTICS, InsightContext, evaluate_rules, quota_insights
)
from salestrack.engine.types import ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.leadership.conversation import LeadershipConversation
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod
from salestrack.schemas.leadership.conversation_schema import ConversationCreate
from salestrack.services.auth.user_service import UserService, is_admin
from salestrack.services.dashboard.progress_service import progress_to_dicts, totals_to_dict
from salestrack.services.goals.annual_goals_service import deviation_to_dict
from salestrack.services.goals.goal_service import GoalService
from salestrack.services.organization.team_service import TeamService
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import week_range

logger = logging.getLogger(__name__)


def _rounded(values: Dict[str, float]) -> Dict[str, float]:
    return {name: round(value, 2) for name, value in values.items()}


class LeadershipService:
    """Weekly conversation aid for a leader and one of their direct partners."""

    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.goals = GoalService(db)
        self.entries = DailyEntryService(db)

    async def get_partner(self, leader: User, partner_id: int) -> User:
        partner = await UserService(self.db).get_user_or_404(partner_id)
        if not is_admin(leader) and partner.parent_leader_id != leader.id:
            raise PermissionDeniedError(f"User {partner_id} is not a direct partner of user {leader.id}")
        return partner

    async def get_weekly_conversation(
        self,
        leader: User,
        partner_id: int,
        as_of: Optional[date] = None
    ) -> Dict[str, Any]:
        as_of = as_of or date.today()
        partner = await self.get_partner(leader, partner_id)
        week = week_range(as_of)

        records = await self.entries.get_user_records(partner.id, week)
        totals = aggregate(records, week)
        weekly_goals = await self.goals.get_goal_set(partner.id, GoalPeriod.WEEKLY, week.start, GoalAuthor.SELF)
        progress = progress_for_goals(totals, weekly_goals, self.config.progress)
        strengths, weaknesses = classify_progress(progress, self.config.strength_at, self.config.weakness_below)

        quotas = compute_quotas(totals)
        team_averages = await TeamService(self.db).get_team_quota_averages(partner.team_id, as_of)
        analysis = analyze_quotas(quotas, team_averages, self.config.quota_bands)

        context = InsightContext(
            totals=totals,
            quotas=quotas,
            quota_analysis=analysis,
            entry_count=len(records),
            config=self.config,
        )
        conversation_points = evaluate_rules(QUOTA_HEURISTICS + PATTERN_RULES, context)
        agenda = evaluate_rules(AGENDA_RULES, context)

        self_yearly = await self.goals.get_latest_goal_set(partner.id, GoalPeriod.YEARLY, GoalAuthor.SELF, as_of)
        fk_yearly = await self.goals.get_latest_goal_set(partner.id, GoalPeriod.YEARLY, GoalAuthor.MANAGER, as_of)
        consistency = check_consistency(
            self_yearly, fk_yearly,
            self.config.deviation_tolerance_percent,
            self.config.deviation_red_percent,
        )

        latest = records[0] if records else None
        return {
            "partner": {
                "id": partner.id,
                "full_name": partner.full_name,
                "team_name": partner.team.name if partner.team else None,
                "role": partner.role.value,
            },
            "week_start": week.start,
            "week_end": week.end,
            "entry_count": len(records),
            "totals": totals_to_dict(totals),
            "targets": weekly_goals.as_dict(),
            "progress": progress_to_dicts(progress),
            "strengths": [metric.label for metric in strengths],
            "weaknesses": [metric.label for metric in weaknesses],
            "quotas": _rounded(quotas),
            "team_averages": _rounded(team_averages),
            "quota_analysis": [
                dict(asdict(item), own=round(item.own, 2), team=round(item.team, 2),
                     delta_percent=round(item.delta_percent, 1))
                for item in analysis.values()
            ],
            "conversation_points": [insight.message for insight in conversation_points],
            "agenda_snippets": [insight.message for insight in agenda],
            "quota_insights": quota_insights(analysis),
            "goal_deviations": [deviation_to_dict(record) for record in top_deviations(consistency.deviations)],
            "highlight_yesterday": latest.highlight if latest else None,
            "help_needed": latest.help_needed if latest else None,
            "improvement_today": latest.improvement_note if latest else None,
        }

    async def save_conversation(self, leader: User, partner_id: int, data: ConversationCreate) -> LeadershipConversation:
        partner = await self.get_partner(leader, partner_id)
        try:
            conversation = LeadershipConversation(
                partner_id=partner.id,
                leader_id=leader.id,
                notes=data.notes,
                action_items=data.action_items,
                next_steps=data.next_steps,
                conversation_date=datetime.utcnow(),
                created_by=leader.id,
            )
            self.db.add(conversation)
            await self.db.commit()
            await self.db.refresh(conversation)

            log_user_action(leader.id, "CREATE", "leadership_conversation", conversation.id)
            return conversation

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving conversation for partner {partner_id}: {str(e)}")
            raise

    async def get_conversations(self, leader: User, partner_id: int, limit: int = 10) -> List[LeadershipConversation]:
        partner = await self.get_partner(leader, partner_id)
        result = await self.db.execute(
            select(LeadershipConversation).where(
                LeadershipConversation.partner_id == partner.id,
                LeadershipConversation.is_deleted == False
            ).order_by(LeadershipConversation.conversation_date.desc()).limit(limit)
        )
        return list(result.scalars().all())
