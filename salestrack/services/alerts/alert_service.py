import logging
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.config import PlanningCycle, settings
from salestrack.core.exceptions import NotFoundError, PermissionDeniedError
from salestrack.core.logging import log_user_action
from salestrack.engine import check_consistency, is_on_track, months_between, project_expectation
from salestrack.engine.types import ThresholdConfig
from salestrack.models.alerts.alert import Alert
from salestrack.models.auth.user import User
from salestrack.models.shared.enums import AlertSeverity, AlertType, DeviationSeverity, GoalAuthor, GoalPeriod, MetricKey
from salestrack.services.auth.user_service import UserService, is_admin
from salestrack.services.goals.annual_goals_service import AnnualGoalsService, cycle_length_months
from salestrack.services.goals.goal_service import GoalService

logger = logging.getLogger(__name__)


def active_cycles(today: date) -> List[PlanningCycle]:
    return [cycle for cycle in settings.PLANNING_CYCLES if cycle.start <= today <= cycle.end]


class AlertService:
    def __init__(self, db: AsyncSession, config: Optional[ThresholdConfig] = None):
        self.db = db
        self.config = config or ThresholdConfig()

    async def _open_alert_keys(self) -> set:
        result = await self.db.execute(
            select(Alert.alert_type, Alert.entity_id, Alert.metric, Alert.cycle_label).where(
                Alert.is_resolved == False,
                Alert.is_deleted == False
            )
        )
        return {tuple(row) for row in result.all()}

    async def scan_goal_deviations(self, today: Optional[date] = None) -> Dict[str, int]:
        """Create alerts for partners whose yearly goals deviate or who fall off the expected path.

        An open (unresolved) alert for the same user, type, metric and cycle suppresses a new one.
        """
        today = today or date.today()
        goals = GoalService(self.db)
        annual = AnnualGoalsService(self.db, self.config)
        partners = [user for user in await UserService(self.db).get_active_users() if user.parent_leader_id]
        open_keys = await self._open_alert_keys()

        candidates: List[Tuple[User, PlanningCycle, AlertType, str, AlertSeverity, str, str]] = []
        for cycle in active_cycles(today):
            elapsed = months_between(cycle.start, today)
            total = cycle_length_months(cycle)
            for partner in partners:
                self_goals = await goals.get_goal_set(partner.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.SELF)
                fk_goals = await goals.get_goal_set(partner.id, GoalPeriod.YEARLY, cycle.start, GoalAuthor.MANAGER)

                consistency = check_consistency(
                    self_goals, fk_goals,
                    self.config.deviation_tolerance_percent,
                    self.config.deviation_red_percent,
                )
                for record in consistency.deviations:
                    severity = AlertSeverity.HIGH if record.severity == DeviationSeverity.RED else AlertSeverity.MEDIUM
                    candidates.append((
                        partner, cycle, AlertType.GOAL_DEVIATION, record.metric.value, severity,
                        f"{record.metric_label} goal deviation for {partner.full_name}",
                        f"Self goal {record.value_a} vs. FK goal {record.value_b} "
                        f"({record.delta_percent:.0f}% deviation, cycle {cycle.label})",
                    ))

                fa_target = self_goals.target(MetricKey.FA)
                if fa_target > 0 and elapsed > 0:
                    expected = project_expectation(fa_target, elapsed, total)
                    actuals = await annual.get_current_actuals(partner.id, cycle, today)
                    actual = actuals[MetricKey.FA.value]
                    if not is_on_track(actual, expected, self.config.on_track_factor):
                        candidates.append((
                            partner, cycle, AlertType.OFF_TRACK, MetricKey.FA.value, AlertSeverity.MEDIUM,
                            f"{partner.full_name} is behind the FA path",
                            f"{actual} FA after {elapsed} of {total} months, {expected} expected (cycle {cycle.label})",
                        ))

        created = 0
        try:
            for partner, cycle, alert_type, metric, severity, title, message in candidates:
                key = (alert_type.value, partner.id, metric, cycle.label)
                if key in open_keys:
                    continue
                self.db.add(Alert(
                    alert_type=alert_type.value,
                    severity=severity.value,
                    title=title,
                    message=message,
                    entity_type="USER",
                    entity_id=partner.id,
                    metric=metric,
                    cycle_label=cycle.label,
                    assigned_to=partner.parent_leader_id,
                ))
                open_keys.add(key)
                created += 1
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error creating deviation alerts: {str(e)}")
            raise

        logger.info(f"Deviation scan: {len(partners)} partner(s) checked, {created} alert(s) created")
        return {"scanned_users": len(partners), "created": created}

    async def get_alerts(self, user: User, include_resolved: bool = False) -> List[Alert]:
        """Admins see every alert, everyone else the alerts assigned to them."""
        conditions = [Alert.is_deleted == False]
        if not is_admin(user):
            conditions.append(Alert.assigned_to == user.id)
        if not include_resolved:
            conditions.append(Alert.is_resolved == False)
        result = await self.db.execute(select(Alert).where(*conditions).order_by(Alert.id.desc()))
        return list(result.scalars().all())

    async def resolve_alert(self, alert_id: int, user: User, resolution_notes: Optional[str] = None) -> Alert:
        result = await self.db.execute(
            select(Alert).where(Alert.id == alert_id, Alert.is_deleted == False)
        )
        alert = result.scalars().first()
        if not alert:
            raise NotFoundError(f"Alert with ID {alert_id} not found")
        if not is_admin(user) and alert.assigned_to != user.id:
            raise PermissionDeniedError("Alert is assigned to another user")

        try:
            alert.is_read = True
            alert.is_resolved = True
            alert.resolved_by = user.id
            alert.resolved_at = datetime.utcnow()
            alert.resolution_notes = resolution_notes
            alert.updated_by = user.id
            await self.db.commit()
            await self.db.refresh(alert)

            log_user_action(user.id, "RESOLVE", "alert", alert.id)
            return alert

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error resolving alert {alert_id}: {str(e)}")
            raise
