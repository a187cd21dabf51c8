"""
Scheduled alert tasks; each run uses its own engine and async session
"""
import asyncio
import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from salestrack.core.celery_app import celery_app
from salestrack.core.config import settings

logger = logging.getLogger("celery")

# Create async engine for background tasks
async_engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    future=True,
    pool_pre_ping=True,
)

async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

def run_async_task(coro):
    """Helper function to run async coroutines in Celery tasks"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    except Exception as e:
        logger.error(f"Error in async task: {e}")
        raise
    finally:
        loop.close()

async def _scan(session_maker, today: Optional[date] = None) -> dict:
    async with session_maker() as db:
        # Import inside function to avoid circular imports
        from salestrack.services.admin.config_service import ConfigService
        from salestrack.services.alerts.alert_service import AlertService

        config = await ConfigService(db).get_threshold_config()
        return await AlertService(db, config).scan_goal_deviations(today)

@celery_app.task
def scan_goal_deviations(today: Optional[str] = None):
    """Daily scan for self vs FK goal deviations and partners behind their FA path"""
    scan_day = date.fromisoformat(today) if today else None
    result = run_async_task(_scan(async_session_maker, scan_day))
    logger.info(f"Goal deviation scan finished: {result}")
    return result
