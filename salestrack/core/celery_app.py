import sys

from celery import Celery
from celery.schedules import crontab

from salestrack.core.config import settings

# Create Celery app
celery_app = Celery(
    "salestrack",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "salestrack.workers.celery_tasks.alert_tasks",
    ]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    result_expires=3600,
)

# Windows-specific configuration
if sys.platform == 'win32':
    celery_app.conf.update(
        worker_pool='threads',
        worker_concurrency=4
    )

celery_app.conf.beat_schedule = {
    "scan-goal-deviations-daily": {
        "task": "salestrack.workers.celery_tasks.alert_tasks.scan_goal_deviations",
        "schedule": crontab(hour=6, minute=0),  # Every morning before the first 1:1s
    },
}
