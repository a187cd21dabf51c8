import json
import math
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.config import settings
from salestrack.core.exceptions import NotFoundError, ValidationError
from salestrack.core.logging import log_user_action
from salestrack.engine.types import ColorThresholds, QuotaBands, ThresholdConfig
from salestrack.models.system.system_setting import SystemSetting
from salestrack.schemas.admin.config_schema import ConfigEntry

logger = logging.getLogger(__name__)

# key -> (Settings attribute, data type, description)
CONFIG_DEFINITIONS: Dict[str, Tuple[str, str, str]] = {
    "progress_yellow_threshold": ("PROGRESS_YELLOW_THRESHOLD", "FLOAT", "Progress percentage from which the bar turns yellow"),
    "progress_green_threshold": ("PROGRESS_GREEN_THRESHOLD", "FLOAT", "Progress percentage from which the bar turns green"),
    "progress_diamond_threshold": ("PROGRESS_DIAMOND_THRESHOLD", "OPTIONAL_FLOAT", "Progress percentage for the diamond band (unset = disabled)"),
    "mirror_yellow_threshold": ("MIRROR_YELLOW_THRESHOLD", "FLOAT", "Previous-month mirror: yellow from"),
    "mirror_green_threshold": ("MIRROR_GREEN_THRESHOLD", "FLOAT", "Previous-month mirror: green from"),
    "deviation_tolerance_percent": ("DEVIATION_TOLERANCE_PERCENT", "FLOAT", "Self vs FK goal deviation that is reported"),
    "deviation_red_percent": ("DEVIATION_RED_PERCENT", "FLOAT", "Self vs FK goal deviation that is reported as red"),
    "plan_consistency_tolerance": ("PLAN_CONSISTENCY_TOLERANCE", "FLOAT", "Allowed gap between planned months and yearly goals (%)"),
    "on_track_factor": ("ON_TRACK_FACTOR", "FLOAT", "Share of the expected value that still counts as on track"),
    "target_increase_threshold": ("TARGET_INCREASE_THRESHOLD", "FLOAT", "Monthly FA target increase that needs a justification (%)"),
    "previous_month_miss_threshold": ("PREVIOUS_MONTH_MISS_THRESHOLD", "FLOAT", "Previous month FA achievement below which a reason is required (%)"),
    "quota_warning_percent": ("QUOTA_WARNING_PERCENT", "FLOAT", "Quota delta vs team average that is a warning"),
    "quota_critical_percent": ("QUOTA_CRITICAL_PERCENT", "FLOAT", "Quota delta vs team average that is critical"),
    "quota_excellent_percent": ("QUOTA_EXCELLENT_PERCENT", "FLOAT", "Quota delta vs team average that is excellent"),
    "strength_at": ("STRENGTH_AT", "FLOAT", "Progress percentage from which a metric counts as a strength"),
    "weakness_below": ("WEAKNESS_BELOW", "FLOAT", "Progress percentage below which a metric counts as a weakness"),
    "min_tiv_per_fa": ("MIN_TIV_PER_FA", "FLOAT", "TIV invitations per FA below which a talking point is raised"),
    "min_tgs_per_tiv": ("MIN_TGS_PER_TIV", "FLOAT", "TGS registrations per TIV invitation below which a talking point is raised"),
    "min_recommendations_per_fa": ("MIN_RECOMMENDATIONS_PER_FA", "FLOAT", "Recommendations per FA below which a talking point is raised"),
    "min_bav_per_fa": ("MIN_BAV_PER_FA", "FLOAT", "BAV checks per FA below which a talking point is raised"),
    "lock_days": ("PLAN_LOCK_DAYS", "INTEGER", "Days an annual plan stays locked after finalising"),
}


def default_config() -> Dict[str, Any]:
    return {key: getattr(settings, attr) for key, (attr, _, _) in CONFIG_DEFINITIONS.items()}


def coerce_config_value(key: str, value: Any) -> Any:
    """Validate one admin value against its declared type."""
    if key not in CONFIG_DEFINITIONS:
        raise ValidationError(f"Unknown config key: {key}")
    data_type = CONFIG_DEFINITIONS[key][1]

    if value is None or value == "":
        if data_type == "OPTIONAL_FLOAT":
            return None
        raise ValidationError(f"{key} requires a value")

    try:
        number = int(value) if data_type == "INTEGER" else float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be numeric")

    if math.isnan(number) or math.isinf(number) or number < 0:
        raise ValidationError(f"{key} must be a finite, non-negative number")
    if data_type == "INTEGER" and number == 0:
        raise ValidationError(f"{key} must be at least 1")
    return number


def build_threshold_config(values: Dict[str, Any]) -> ThresholdConfig:
    return ThresholdConfig(
        progress=ColorThresholds(
            yellow=values["progress_yellow_threshold"],
            green=values["progress_green_threshold"],
            diamond=values["progress_diamond_threshold"],
        ),
        mirror=ColorThresholds(
            yellow=values["mirror_yellow_threshold"],
            green=values["mirror_green_threshold"],
        ),
        deviation_tolerance_percent=values["deviation_tolerance_percent"],
        deviation_red_percent=values["deviation_red_percent"],
        plan_consistency_tolerance=values["plan_consistency_tolerance"],
        on_track_factor=values["on_track_factor"],
        target_increase_threshold=values["target_increase_threshold"],
        previous_month_miss_threshold=values["previous_month_miss_threshold"],
        quota_bands=QuotaBands(
            warning=values["quota_warning_percent"],
            critical=values["quota_critical_percent"],
            excellent=values["quota_excellent_percent"],
        ),
        strength_at=values["strength_at"],
        weakness_below=values["weakness_below"],
        min_tiv_per_fa=values["min_tiv_per_fa"],
        min_tgs_per_tiv=values["min_tgs_per_tiv"],
        min_recommendations_per_fa=values["min_recommendations_per_fa"],
        min_bav_per_fa=values["min_bav_per_fa"],
    )


class ConfigService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _stored_settings(self, active_only: bool = True) -> List[SystemSetting]:
        conditions = [SystemSetting.is_deleted == False]
        if active_only:
            conditions.append(SystemSetting.is_active == True)
        result = await self.db.execute(select(SystemSetting).where(*conditions))
        return list(result.scalars().all())

    async def get_config(self) -> Dict[str, Any]:
        """Stored admin values merged over the Settings defaults."""
        values = default_config()
        for row in await self._stored_settings():
            if row.setting_key not in CONFIG_DEFINITIONS:
                logger.warning(f"Ignoring unknown config key in system_settings: {row.setting_key}")
                continue
            values[row.setting_key] = coerce_config_value(row.setting_key, json.loads(row.setting_value))
        return values

    async def get_threshold_config(self) -> ThresholdConfig:
        return build_threshold_config(await self.get_config())

    async def update_configs(self, entries: List[ConfigEntry], current_user_id: int) -> Dict[str, Any]:
        """Upsert several keys; the merged result must keep the bands ordered."""
        try:
            merged = await self.get_config()
            coerced = {}
            for entry in entries:
                coerced[entry.key] = coerce_config_value(entry.key, entry.value)
            merged.update(coerced)
            self._check_ordering(merged)

            existing = {row.setting_key: row for row in await self._stored_settings(active_only=False)}
            for entry in entries:
                data_type = CONFIG_DEFINITIONS[entry.key][1]
                description = entry.description or CONFIG_DEFINITIONS[entry.key][2]
                row = existing.get(entry.key)
                if row is None:
                    row = SystemSetting(
                        category="THRESHOLDS",
                        setting_key=entry.key,
                        data_type=data_type,
                        created_by=current_user_id,
                    )
                    self.db.add(row)
                    existing[entry.key] = row
                row.setting_value = json.dumps(coerced[entry.key])
                row.description = description
                row.is_active = True
                row.updated_by = current_user_id

            await self.db.commit()
            log_user_action(current_user_id, "UPDATE", "config", ",".join(coerced))
            return merged

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error updating config: {str(e)}")
            raise

    async def delete_config(self, key: str, current_user_id: int) -> Dict[str, Any]:
        """Deactivate a stored override so the default applies again."""
        result = await self.db.execute(
            select(SystemSetting).where(
                SystemSetting.setting_key == key,
                SystemSetting.is_active == True,
                SystemSetting.is_deleted == False
            )
        )
        row = result.scalars().first()
        if not row:
            raise NotFoundError(f"Config key {key} is not overridden")

        try:
            row.is_active = False
            row.updated_by = current_user_id
            await self.db.commit()
            log_user_action(current_user_id, "DELETE", "config", key)
            return await self.get_config()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error deleting config {key}: {str(e)}")
            raise

    @staticmethod
    def _check_ordering(values: Dict[str, Any]):
        if values["progress_yellow_threshold"] > values["progress_green_threshold"]:
            raise ValidationError("progress_yellow_threshold must not exceed progress_green_threshold")
        diamond: Optional[float] = values["progress_diamond_threshold"]
        if diamond is not None and diamond < values["progress_green_threshold"]:
            raise ValidationError("progress_diamond_threshold must not be below progress_green_threshold")
        if values["mirror_yellow_threshold"] > values["mirror_green_threshold"]:
            raise ValidationError("mirror_yellow_threshold must not exceed mirror_green_threshold")
        if values["deviation_tolerance_percent"] > values["deviation_red_percent"]:
            raise ValidationError("deviation_tolerance_percent must not exceed deviation_red_percent")
        if values["quota_warning_percent"] > values["quota_critical_percent"]:
            raise ValidationError("quota_warning_percent must not exceed quota_critical_percent")
        if values["weakness_below"] > values["strength_at"]:
            raise ValidationError("weakness_below must not exceed strength_at")
