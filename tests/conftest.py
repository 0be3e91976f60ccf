"""
Test Suite Configuration
"""
import pytest
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from goaltracker.config import Settings
from goaltracker.database.connection import get_db_dependency
from goaltracker.database.models import Base
from goaltracker.engine import AdvisorRecord, AvailabilityRecord, SessionConfig, SessionSnapshot, WeightRecord
from goaltracker.serving.api.main import create_api_app


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
async def test_engine():
    """Create an in-memory database shared by every connection of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the test database; Redis is never initialized"""
    app = create_api_app()

    async def override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_dependency] = override_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
def two_hour_snapshot() -> SessionSnapshot:
    """
    Goal 100000 over 9:00-10:00 weighted 60/40.

    Ana works both hours, Beto is off at 10:00.
    """
    return SessionSnapshot.build(
        session=SessionConfig(total_daily_goal=100000, start_hour=9, end_hour=10),
        weights=[
            WeightRecord(hour_start=9, percentage=60),
            WeightRecord(hour_start=10, percentage=40),
        ],
        advisors=[
            AdvisorRecord(advisor_id="ana", name="Ana", total_sales=50000, tickets_count=10),
            AdvisorRecord(advisor_id="beto", name="Beto", total_sales=45000, tickets_count=0),
        ],
        availability=[
            AvailabilityRecord(advisor_id="beto", hour_start=10, is_active=False),
        ],
    )


@pytest.fixture
def full_day_snapshot() -> SessionSnapshot:
    """Three advisors over 9:00-12:00 with an even 25% weight per hour"""
    return SessionSnapshot.build(
        session=SessionConfig(total_daily_goal=400000, start_hour=9, end_hour=12),
        weights=[WeightRecord(hour_start=hour, percentage=25) for hour in range(9, 13)],
        advisors=[
            AdvisorRecord(advisor_id="a1", name="Ana"),
            AdvisorRecord(advisor_id="a2", name="Beto"),
            AdvisorRecord(advisor_id="a3", name="Carla"),
        ],
        availability=[
            AvailabilityRecord(advisor_id="a2", hour_start=11, is_active=False),
            AvailabilityRecord(advisor_id="a3", hour_start=12, is_active=True),
        ],
    )
