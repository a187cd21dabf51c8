import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from salestrack.main import app
from salestrack.core.database import get_async_session, Base
from salestrack.core.security import create_access_token
from salestrack.models.auth.user import User
from salestrack.models.organization.team import Team
from salestrack.models.shared.enums import UserRole

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seed(session_maker) -> dict:
    """Team "Nord" with an admin, a leader and two advisors reporting to the leader"""
    async with session_maker() as session:
        team = Team(name="Nord", description="Team Nord", is_active=True)
        session.add(team)
        await session.flush()

        admin = User(email="admin@example.com", full_name="Anna Admin", role=UserRole.ADMIN, is_active=True)
        leader = User(email="leader@example.com", full_name="Lena Leader", role=UserRole.LEADER,
                      team_id=team.id, is_team_leader=True, is_active=True)
        session.add_all([admin, leader])
        await session.flush()

        advisor = User(email="advisor@example.com", full_name="Alex Advisor", role=UserRole.ADVISOR,
                       team_id=team.id, parent_leader_id=leader.id, is_active=True)
        other = User(email="other@example.com", full_name="Olga Other", role=UserRole.ADVISOR,
                     team_id=team.id, parent_leader_id=leader.id, is_active=True)
        session.add_all([advisor, other])
        await session.commit()

        return {
            "team_id": team.id,
            "admin_id": admin.id,
            "leader_id": leader.id,
            "advisor_id": advisor.id,
            "other_id": other.id,
        }


@pytest.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Create test client"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers_for(user_id: int) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def admin_headers(seed) -> dict:
    return auth_headers_for(seed["admin_id"])


@pytest.fixture
def leader_headers(seed) -> dict:
    return auth_headers_for(seed["leader_id"])


@pytest.fixture
def advisor_headers(seed) -> dict:
    return auth_headers_for(seed["advisor_id"])
