import logging
from dataclasses import asdict
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.config import PlanningCycle, settings
from salestrack.core.exceptions import (
    BadRequestError, ConflictError, PermissionDeniedError, ValidationError
)
from salestrack.core.logging import log_user_action
from salestrack.engine import (
    aggregate, build_path_expectations, check_consistency, check_plan_consistency,
    delta_color, months_between, signed_delta_percent
)
from salestrack.engine.types import (
    ConsistencyResult, DateRange, DeviationRecord, GoalSet, ThresholdConfig, normalize_number
)
from salestrack.models.auth.user import User
from salestrack.models.goals.baseline_snapshot import BaselineSnapshot
from salestrack.models.goals.plan_lock import PlanLock
from salestrack.models.shared.enums import GoalAuthor, GoalPeriod, MetricKey, UserRole
from salestrack.schemas.goals.annual_goals_schema import AnnualGoalsSave
from salestrack.services.auth.user_service import UserService, is_admin
from salestrack.services.dashboard.progress_service import totals_to_dict
from salestrack.services.goals.goal_service import GoalService, ensure_can_author
from salestrack.services.tracking.daily_entry_service import DailyEntryService
from salestrack.utils.periods import add_months, iter_months, month_key, parse_month

logger = logging.getLogger(__name__)

SAVE_STEPS = {1: "baseline", 2: "goals", 3: "plan_months", 4: "finalize"}


def deviation_to_dict(record: DeviationRecord) -> Dict[str, Any]:
    item = asdict(record)
    item["delta_percent"] = round(record.delta_percent, 2)
    return item


def consistency_to_dict(result: ConsistencyResult) -> Dict[str, Any]:
    return {
        "is_consistent": result.is_consistent,
        "tolerance_percent": result.tolerance_percent,
        "deviations": [deviation_to_dict(record) for record in result.deviations],
    }


def utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Compare lock timestamps as naive UTC whatever the backend returns."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def resolve_cycle(label: Optional[str]) -> PlanningCycle:
    cycle = settings.get_cycle(label or settings.DEFAULT_CYCLE_LABEL)
    if cycle is None:
        raise BadRequestError(f"Unknown planning cycle: {label}")
    return cycle


def plan_month_starts(cycle: PlanningCycle) -> List[date]:
    """Months after the cutoff month up to the cycle end."""
    return iter_months(add_months(cycle.baseline_cutoff, 1), cycle.end)


def cycle_length_months(cycle: PlanningCycle) -> int:
    return months_between(cycle.start, cycle.end + timedelta(days=1))


class AnnualGoalsService:
    """Annual planning per cycle: IST-Basis, self and FK goals, plan months and lock."""

    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None, lock_days: Optional[int] = None):
        self.db = db
        self.config = config or ThresholdConfig()
        self.lock_days = lock_days or settings.PLAN_LOCK_DAYS
        self.goals = GoalService(db)
        self.entries = DailyEntryService(db)

    # ---------- Loading ----------
    async def get_baseline(self, user_id: int, cycle: PlanningCycle) -> Tuple[Dict[str, float], str]:
        """Stored snapshot if present, otherwise entries summed from cycle start to the cutoff."""
        result = await self.db.execute(
            select(BaselineSnapshot).where(
                BaselineSnapshot.user_id == user_id,
                BaselineSnapshot.cycle_start == cycle.start,
                BaselineSnapshot.is_deleted == False
            )
        )
        snapshot = result.scalars().first()
        if snapshot is not None:
            return GoalSet.from_mapping(snapshot.metric_values).as_dict(), "snapshot"

        window = DateRange(start=cycle.start, end=cycle.baseline_cutoff)
        records = await self.entries.get_user_records(user_id, window)
        return totals_to_dict(aggregate(records, window)), "entries"

    async def get_lock(self, user_id: int, cycle: PlanningCycle) -> Optional[PlanLock]:
        result = await self.db.execute(
            select(PlanLock).where(
                PlanLock.user_id == user_id,
                PlanLock.cycle_start == cycle.start,
                PlanLock.is_deleted == False
            )
        )
        return result.scalars().first()

    @staticmethod
    def is_locked(lock: Optional[PlanLock], now: Optional[datetime] = None) -> bool:
        if lock is None or lock.locked_until is None:
            return False
        return utc_naive(lock.locked_until) > (now or datetime.utcnow())

    async def get_plan_months(self, user_id: int, cycle: PlanningCycle) -> List[Dict[str, Any]]:
        months = plan_month_starts(cycle)
        if not months:
            return []
        stored = await self.goals.get_monthly_goal_sets(user_id, months[0], months[-1])
        return [
            {"month": month_key(month), "targets": stored[month].as_dict() if month in stored else {}}
            for month in months
        ]

    async def get_current_actuals(self, user_id: int, cycle: PlanningCycle, today: date) -> Dict[str, float]:
        window = DateRange(start=cycle.start, end=min(today, cycle.end))
        records = await self.entries.get_user_records(user_id, window)
        return totals_to_dict(aggregate(records, window))

    # ---------- Views ----------
    async def get_overview(
        self,
        current_user: User,
        target_user: User,
        cycle_label: Optional[str] = None,
        today: Optional[date] = None
    ) -> Dict[str, Any]:
        today = today or date.today()
        cycle = resolve_cycle(cycle_label)

        baseline, baseline_source = await self.get_baseline(target_user.id, cycle)
        self_goals = await self.goals.get_goal_set(target_user.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.SELF)
        fk_record = await self.goals.get_goal_record(target_user.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.MANAGER)
        fk_goals = await self.goals.get_goal_set(target_user.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.MANAGER)
        plan_months = await self.get_plan_months(target_user.id, cycle)
        lock = await self.get_lock(target_user.id, cycle)
        locked = self.is_locked(lock)

        consistency = check_consistency(
            self_goals, fk_goals,
            self.config.deviation_tolerance_percent,
            self.config.deviation_red_percent,
        )
        plan_consistency = check_plan_consistency(
            self_goals,
            baseline,
            [month["targets"] for month in plan_months],
            self.config.plan_consistency_tolerance,
            self.config.deviation_red_percent,
        )

        team_overview = []
        if current_user.role in (UserRole.LEADER, UserRole.ADMIN):
            team_overview = await self.get_team_overview(current_user.id, cycle, today)

        return {
            "user_id": target_user.id,
            "current_cycle": cycle.dict(),
            "baseline": baseline,
            "baseline_source": baseline_source,
            "baseline_editable": not locked,
            "self_goals": self_goals.as_dict(),
            "fk_goals": fk_goals.as_dict(),
            "fk_comment": fk_record.comment if fk_record else None,
            "plan_months": plan_months,
            "consistency_check": consistency_to_dict(consistency),
            "plan_consistency": consistency_to_dict(plan_consistency),
            "team_overview": team_overview,
            "is_locked": locked,
            "lock_expiry": lock.locked_until if locked else None,
        }

    async def get_team_overview(self, leader_id: int, cycle: PlanningCycle, today: date) -> List[Dict[str, Any]]:
        """One row per direct partner: path expectation, on-track flag and self vs FK FA delta."""
        partners = await UserService(self.db).get_partners(leader_id)
        elapsed = months_between(cycle.start, min(today, cycle.end))
        total = cycle_length_months(cycle)

        rows = []
        for partner in partners:
            baseline, _ = await self.get_baseline(partner.id, cycle)
            self_goals = await self.goals.get_goal_set(partner.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.SELF)
            fk_goals = await self.goals.get_goal_set(partner.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.MANAGER)
            actuals = await self.get_current_actuals(partner.id, cycle, today)

            path = build_path_expectations(
                self_goals,
                {MetricKey(key): value for key, value in actuals.items()},
                elapsed,
                total,
                self.config.on_track_factor,
            )
            fa_path = next(item for item in path if item.metric == MetricKey.FA)
            delta = round(signed_delta_percent(self_goals.target(MetricKey.FA), fk_goals.target(MetricKey.FA)))

            rows.append({
                "user_id": partner.id,
                "full_name": partner.full_name,
                "team_name": partner.team.name if partner.team else None,
                "self_goals": self_goals.as_dict(),
                "fk_goals": fk_goals.as_dict(),
                "baseline": baseline,
                "current_actuals": actuals,
                "path_expectation": [asdict(item) for item in path],
                "on_track": fa_path.on_track,
                "delta": delta,
                "color": delta_color(delta, self.config.deviation_tolerance_percent, self.config.deviation_red_percent),
            })
        return rows

    # ---------- Saving ----------
    def _check_plan_access(self, current_user: User, target_user: User):
        if is_admin(current_user) or current_user.id == target_user.id or target_user.parent_leader_id == current_user.id:
            return
        raise PermissionDeniedError(f"Not allowed to edit the annual plan of user {target_user.id}")

    def _check_step_payload(self, current_user: User, target_user: User, cycle: PlanningCycle, payload: AnnualGoalsSave):
        """Reject incomplete payloads and foreign goal authorship before anything is written."""
        if payload.step == 1 and payload.baseline is None:
            raise ValidationError("Step 1 requires baseline values")
        if payload.step == 2:
            if payload.self_goals is None and payload.fk_goals is None:
                raise ValidationError("Step 2 requires self_goals or fk_goals")
            if payload.self_goals is not None:
                ensure_can_author(current_user, target_user, GoalAuthor.SELF)
            if payload.fk_goals is not None:
                ensure_can_author(current_user, target_user, GoalAuthor.MANAGER)
        if payload.step == 3:
            if not payload.plan_months:
                raise ValidationError("Step 3 requires plan_months")
            allowed = set(plan_month_starts(cycle))
            for plan_month in payload.plan_months:
                if parse_month(plan_month.month) not in allowed:
                    raise ValidationError(f"{plan_month.month} is not a plan month of cycle {cycle.label}")

    async def save_step(
        self,
        current_user: User,
        target_user: User,
        payload: AnnualGoalsSave,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """Run one save step of the annual planning workflow and return the refreshed overview."""
        now = now or datetime.utcnow()
        if payload.step not in SAVE_STEPS:
            raise BadRequestError(f"Unknown save step {payload.step}; expected 1-4")
        cycle = resolve_cycle(payload.cycle)
        self._check_plan_access(current_user, target_user)
        self._check_step_payload(current_user, target_user, cycle, payload)

        # A rollback expires loaded users, so the ids are read up front
        target_id, author_id = target_user.id, current_user.id
        lock = await self.get_lock(target_id, cycle)
        if self.is_locked(lock, now):
            raise ConflictError(f"Annual plan is locked until {utc_naive(lock.locked_until).isoformat()}")

        try:
            if payload.step == 1:
                await self._save_baseline(author_id, target_id, cycle, payload)
            elif payload.step == 2:
                await self._save_goals(author_id, target_id, cycle, payload)
            elif payload.step == 3:
                await self._save_plan_months(author_id, target_id, payload)
            else:
                await self._finalize(author_id, target_id, cycle, lock, now)

            await self.db.commit()
            log_user_action(author_id, f"SAVE_{SAVE_STEPS[payload.step].upper()}", "annual_goals", target_id)

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving annual goals step {payload.step} for user {target_id}: {str(e)}")
            raise

        return await self.get_overview(current_user, target_user, cycle.label, now.date())

    async def _save_baseline(self, author_id: int, target_id: int, cycle: PlanningCycle, payload: AnnualGoalsSave):
        values = {metric.value: normalize_number(value) for metric, value in payload.baseline.items()}

        result = await self.db.execute(
            select(BaselineSnapshot).where(
                BaselineSnapshot.user_id == target_id,
                BaselineSnapshot.cycle_start == cycle.start,
                BaselineSnapshot.is_deleted == False
            )
        )
        snapshot = result.scalars().first()
        if snapshot is None:
            snapshot = BaselineSnapshot(user_id=target_id, cycle_start=cycle.start, created_by=author_id)
            self.db.add(snapshot)
        snapshot.metric_values = values
        snapshot.updated_by = author_id
        await self.db.flush()

    async def _save_goals(self, author_id: int, target_id: int, cycle: PlanningCycle, payload: AnnualGoalsSave):
        if payload.self_goals is not None:
            await self.goals.save_goal_set(
                target_id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.SELF,
                payload.self_goals, author_id, commit=False,
            )
        if payload.fk_goals is not None:
            await self.goals.save_goal_set(
                target_id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.MANAGER,
                payload.fk_goals, author_id, comment=payload.fk_comment, commit=False,
            )

    async def _save_plan_months(self, author_id: int, target_id: int, payload: AnnualGoalsSave):
        for plan_month in payload.plan_months:
            await self.goals.save_goal_set(
                target_id, GoalPeriod.MONTHLY, parse_month(plan_month.month), GoalAuthor.SELF,
                plan_month.targets, author_id, commit=False,
            )

    async def _finalize(self, author_id: int, target_id: int, cycle: PlanningCycle,
                        lock: Optional[PlanLock], now: datetime):
        if lock is None:
            lock = PlanLock(user_id=target_id, cycle_start=cycle.start, created_by=author_id)
            self.db.add(lock)
        lock.finalized_at = now
        lock.locked_until = now + timedelta(days=self.lock_days)
        lock.updated_by = author_id
        await self.db.flush()
