import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from salestrack.core.logging import log_user_action
from salestrack.engine.types import DailyRecord, DateRange
from salestrack.models.shared.enums import MetricKey
from salestrack.models.tracking.daily_entry import DailyEntry
from salestrack.schemas.tracking.daily_entry_schema import DailyEntryCreate

logger = logging.getLogger(__name__)

METRIC_COLUMNS = [metric.value for metric in MetricKey]


def entry_to_record(entry: DailyEntry) -> DailyRecord:
    """Convert a stored row into the engine's value object."""
    return DailyRecord.from_counts(
        entry.user_id,
        entry.entry_date,
        {column: getattr(entry, column) for column in METRIC_COLUMNS},
        highlight=entry.highlight_yesterday,
        help_needed=entry.help_needed,
        improvement_note=entry.improvement_today,
    )


class DailyEntryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert_entry(self, user_id: int, entry_data: DailyEntryCreate) -> DailyEntry:
        """One entry per user and day; saving the same day again overwrites it."""
        try:
            result = await self.db.execute(
                select(DailyEntry).where(
                    DailyEntry.user_id == user_id,
                    DailyEntry.entry_date == entry_data.entry_date,
                    DailyEntry.is_deleted == False
                )
            )
            entry = result.scalars().first()

            if entry is None:
                entry = DailyEntry(user_id=user_id, created_by=user_id, **entry_data.dict())
                self.db.add(entry)
                action = "CREATE"
            else:
                for field, value in entry_data.dict().items():
                    setattr(entry, field, value)
                entry.updated_by = user_id
                action = "UPDATE"

            await self.db.commit()
            await self.db.refresh(entry)

            log_user_action(user_id, action, "daily_entry", entry.entry_date.isoformat())
            return entry

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Error saving daily entry for user {user_id}: {str(e)}")
            raise

    async def get_entries(
        self,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[DailyEntry]:
        """Entries of one user, newest first; defaults to the last 7 days."""
        end_date = end_date or date.today()
        start_date = start_date or end_date - timedelta(days=7)
        result = await self.db.execute(
            select(DailyEntry).where(
                DailyEntry.user_id == user_id,
                DailyEntry.entry_date >= start_date,
                DailyEntry.entry_date <= end_date,
                DailyEntry.is_deleted == False
            ).order_by(DailyEntry.entry_date.desc())
        )
        return list(result.scalars().all())

    async def get_records(self, user_ids: Iterable[int], date_range: DateRange) -> List[DailyRecord]:
        user_ids = list(user_ids)
        if not user_ids:
            return []
        result = await self.db.execute(
            select(DailyEntry).where(
                DailyEntry.user_id.in_(user_ids),
                DailyEntry.entry_date >= date_range.start,
                DailyEntry.entry_date <= date_range.end,
                DailyEntry.is_deleted == False
            ).order_by(DailyEntry.entry_date.desc())
        )
        return [entry_to_record(entry) for entry in result.scalars().all()]

    async def get_user_records(self, user_id: int, date_range: DateRange) -> List[DailyRecord]:
        return await self.get_records([user_id], date_range)
