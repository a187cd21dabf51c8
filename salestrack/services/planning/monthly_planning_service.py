import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.exceptions import ValidationError
from salestrack.core.logging import log_user_action
from salestrack.engine import (
    aggregate, compute_progress, compute_quotas, delta_color, monthly_share,
    progress_for_goals, signed_delta_percent
)
from salestrack.engine.types import GoalSet, ThresholdConfig
from salestrack.models.auth.user import User
from salestrack.models.goals.monthly_plan_note import MonthlyPlanNote
from salestrack.models.shared.enums import ColorBand, GoalAuthor, GoalPeriod, MetricKey
from salestrack.schemas.goals.monthly_planning_schema import FOCUS_AREAS, MonthlyPlanningSave
from salestrack.services.auth.user_service import UserService
from salestrack.services.dashboard.progress_service import progress_to_dicts, totals_to_dict
from salestrack.services.goals.goal_service import GoalService
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import month_key, month_range, parse_month, previous_month

logger = logging.getLogger(__name__)


class MonthlyPlanningService:
    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.goals = GoalService(db)
        self.entries = DailyEntryService(db)

    async def _month_totals(self, user_id: int, month_start: date):
        window = month_range(month_start)
        records = await self.entries.get_user_records(user_id, window)
        return aggregate(records, window)

    async def _fk_monthly_goals(self, user_id: int, month_start: date) -> GoalSet:
        """FK monthly expectation: a twelfth of the latest FK yearly goals, rounded."""
        yearly = await self.goals.get_latest_goal_set(user_id, GoalPeriod.YEARLY, GoalAuthor.MANAGER, month_start)
        return GoalSet.from_mapping(
            {metric: monthly_share(yearly.target(metric)) for metric in MetricKey},
            period=GoalPeriod.MONTHLY,
            author=GoalAuthor.MANAGER,
        )

    def validation_messages(self, previous_fa_progress, previous_goals: GoalSet, goals: GoalSet) -> Dict[str, str]:
        """Keys are the note fields that have to be filled in."""
        messages = {}
        if previous_fa_progress.color_band != ColorBand.NO_TARGET \
                and previous_fa_progress.percentage < self.config.previous_month_miss_threshold:
            messages["previous_month_missed_reason"] = (
                f"FA target of the previous month reached only {previous_fa_progress.percentage:.0f}% - "
                f"please give a reason"
            )

        previous_fa = previous_goals.target(MetricKey.FA)
        current_fa = goals.target(MetricKey.FA)
        if previous_fa > 0 and current_fa > 0:
            increase = signed_delta_percent(previous_fa, current_fa)
            if increase > self.config.target_increase_threshold:
                messages["target_increase_reason"] = (
                    f"FA target rises by {increase:.0f}% compared to the previous month - please justify the increase"
                )
        return messages

    async def _get_note(self, user_id: int, month_start: date) -> Optional[MonthlyPlanNote]:
        result = await self.db.execute(
            select(MonthlyPlanNote).where(
                MonthlyPlanNote.user_id == user_id,
                MonthlyPlanNote.planning_month == month_start,
                MonthlyPlanNote.is_deleted == False
            )
        )
        return result.scalars().first()

    async def _partner_row(self, partner: User, month_start: date, previous_start: date) -> Dict[str, Any]:
        self_goals = await self.goals.get_goal_set(partner.id, GoalPeriod.MONTHLY, month_start, GoalAuthor.SELF)
        fk_goals = await self._fk_monthly_goals(partner.id, month_start)
        previous_totals = await self._month_totals(partner.id, previous_start)
        current_totals = await self._month_totals(partner.id, month_start)

        delta = round(signed_delta_percent(self_goals.target(MetricKey.FA), fk_goals.target(MetricKey.FA)))
        return {
            "user_id": partner.id,
            "full_name": partner.full_name,
            "team_name": partner.team.name if partner.team else None,
            "self_goals": self_goals.as_dict(),
            "fk_goals": fk_goals.as_dict(),
            "previous_month_actual": totals_to_dict(previous_totals),
            "current_month_actual": totals_to_dict(current_totals),
            "delta": delta,
            "color": delta_color(delta, self.config.deviation_tolerance_percent, self.config.deviation_red_percent),
            "kpis": {
                metric.value: {"self_target": self_goals.target(metric), "fk_target": fk_goals.target(metric)}
                for metric in MetricKey
            },
            "quotas": {name: round(value, 2) for name, value in compute_quotas(current_totals).items()},
        }

    async def get_planning(self, user: User, month: Optional[str] = None, today: Optional[date] = None) -> Dict[str, Any]:
        current_key = month or month_key(today or date.today())
        previous_key = previous_month(current_key)
        month_start = parse_month(current_key)
        previous_start = parse_month(previous_key)

        own_goals = await self.goals.get_goal_set(user.id, GoalPeriod.MONTHLY, month_start, GoalAuthor.SELF)
        previous_goals = await self.goals.get_goal_set(user.id, GoalPeriod.MONTHLY, previous_start, GoalAuthor.SELF)
        previous_totals = await self._month_totals(user.id, previous_start)
        mirror = progress_for_goals(previous_totals, previous_goals, self.config.mirror)
        fa_mirror = next(result for result in mirror if result.metric == MetricKey.FA)

        partners = await UserService(self.db).get_partners(user.id)
        partner_rows = [await self._partner_row(partner, month_start, previous_start) for partner in partners]
        note = await self._get_note(user.id, month_start)

        return {
            "current_month": current_key,
            "previous_month": previous_key,
            "own_goals": own_goals.as_dict(),
            "previous_month_mirror": progress_to_dicts(mirror),
            "direct_partners": partner_rows,
            "validation_messages": list(self.validation_messages(fa_mirror, previous_goals, own_goals).values()),
            "focus_areas": FOCUS_AREAS,
            "previous_month_missed_reason": note.previous_month_missed_reason if note else None,
            "target_increase_reason": note.target_increase_reason if note else None,
            "focus_area": note.focus_area if note else None,
        }

    async def save_planning(self, user: User, payload: MonthlyPlanningSave) -> Dict[str, Any]:
        """Store own monthly goals and the planning notes; required reasons must be present."""
        user_id = user.id
        month_start = parse_month(payload.month)
        previous_start = parse_month(previous_month(payload.month))

        previous_goals = await self.goals.get_goal_set(user_id, GoalPeriod.MONTHLY, previous_start, GoalAuthor.SELF)
        previous_totals = await self._month_totals(user_id, previous_start)
        fa_mirror = compute_progress(
            previous_totals[MetricKey.FA], previous_goals.target(MetricKey.FA), self.config.mirror, MetricKey.FA
        )
        goals = GoalSet.from_mapping(payload.goals, period=GoalPeriod.MONTHLY)
        required = self.validation_messages(fa_mirror, previous_goals, goals)
        missing: List[str] = [message for field, message in required.items() if not (getattr(payload, field) or "").strip()]
        if missing:
            raise ValidationError("; ".join(missing))

        if payload.focus_area and payload.focus_area not in FOCUS_AREAS:
            raise ValidationError(f"Unknown focus area: {payload.focus_area}")

        try:
            await self.goals.save_goal_set(
                user_id, GoalPeriod.MONTHLY, month_start, GoalAuthor.SELF,
                payload.goals, user_id, commit=False,
            )
            note = await self._get_note(user_id, month_start)
            if note is None:
                note = MonthlyPlanNote(user_id=user_id, planning_month=month_start, created_by=user_id)
                self.db.add(note)
            note.previous_month_missed_reason = payload.previous_month_missed_reason
            note.target_increase_reason = payload.target_increase_reason
            note.focus_area = payload.focus_area
            note.updated_by = user_id

            await self.db.commit()
            log_user_action(user_id, "SAVE", "monthly_planning", payload.month)

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving monthly planning {payload.month} for user {user_id}: {str(e)}")
            raise

        return await self.get_planning(user, payload.month)
