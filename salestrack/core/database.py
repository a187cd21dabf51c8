# salestrack/core/database.py
from typing import AsyncIterator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from salestrack.core.config import settings
from salestrack.db.base import Base

database_url = settings.DATABASE_URL

engine_options = {
    "echo": False,
    "future": True,
    "pool_pre_ping": True,
}

if not database_url.startswith("sqlite"):
    engine_options.update(
        pool_size=20,
        max_overflow=30,
        pool_timeout=60,
        pool_recycle=3600,      # Recycle connections every hour
    )

engine = create_async_engine(database_url, **engine_options)

async_session_maker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_async_session() -> AsyncIterator[AsyncSession]:
    async with async_session_maker() as session:
        yield session


__all__ = ["Base", "engine", "async_session_maker", "get_async_session"]
