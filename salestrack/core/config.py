# salestrack/core/config.py
import os
from datetime import date
from typing import List, Optional

from pydantic import BaseModel, validator
from pydantic_settings import BaseSettings


class PlanningCycle(BaseModel):
    """One annual planning cycle; IST-Basis is summed from ``start`` to ``baseline_cutoff``."""
    label: str
    start: date
    end: date
    baseline_cutoff: date


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./salestrack.db"

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("Production environment cannot use a local database!")
        return v

    # === Redis / Celery ===
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # === JWT (tokens are issued by the identity provider) ===
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Europe/Berlin"

    # === Planning cycles ===
    PLANNING_CYCLES: List[PlanningCycle] = [
        PlanningCycle(label="bis 30.12.2025", start=date(2025, 1, 1), end=date(2025, 12, 31),
                      baseline_cutoff=date(2025, 10, 1)),
        PlanningCycle(label="bis 30.06.2026", start=date(2025, 7, 1), end=date(2026, 6, 30),
                      baseline_cutoff=date(2026, 4, 1)),
    ]
    DEFAULT_CYCLE_LABEL: str = "bis 30.12.2025"
    PLAN_LOCK_DAYS: int = 7

    # === Business Rules (defaults, overridable through /admin/config) ===
    PROGRESS_YELLOW_THRESHOLD: float = 30
    PROGRESS_GREEN_THRESHOLD: float = 80
    PROGRESS_DIAMOND_THRESHOLD: Optional[float] = None
    MIRROR_YELLOW_THRESHOLD: float = 50
    MIRROR_GREEN_THRESHOLD: float = 80
    DEVIATION_TOLERANCE_PERCENT: float = 25
    DEVIATION_RED_PERCENT: float = 50
    PLAN_CONSISTENCY_TOLERANCE: float = 2
    ON_TRACK_FACTOR: float = 0.9
    TARGET_INCREASE_THRESHOLD: float = 25
    PREVIOUS_MONTH_MISS_THRESHOLD: float = 80
    QUOTA_WARNING_PERCENT: float = 10
    QUOTA_CRITICAL_PERCENT: float = 20
    QUOTA_EXCELLENT_PERCENT: float = 20
    STRENGTH_AT: float = 100
    WEAKNESS_BELOW: float = 50
    MIN_TIV_PER_FA: float = 0.4
    MIN_TGS_PER_TIV: float = 0.2
    MIN_RECOMMENDATIONS_PER_FA: float = 1.0
    MIN_BAV_PER_FA: float = 0.5
    TEAM_AVERAGE_SHORT_DAYS: int = 30
    TEAM_AVERAGE_LONG_DAYS: int = 90

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def get_cycle(self, label: str) -> Optional[PlanningCycle]:
        return next((cycle for cycle in self.PLANNING_CYCLES if cycle.label == label), None)


# Create a global settings instance
settings = Settings()
