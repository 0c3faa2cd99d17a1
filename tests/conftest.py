import sys
import os
from datetime import datetime, timedelta, timezone

# Ensure src directory is in Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from cronguard.database import Base, enable_sqlite_foreign_keys, get_db
from cronguard.dependencies import get_now
from cronguard.main import app
from cronguard.rate_limit import RateLimiter


# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
enable_sqlite_foreign_keys(test_engine.sync_engine)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Controllable stand-in for the request clock."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db():
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db
app.state._testing = True


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    limiter = RateLimiter()
    app.state.rate_limiter = limiter
    return limiter


@pytest.fixture
def clock():
    fake = FakeClock()
    app.dependency_overrides[get_now] = fake
    yield fake
    app.dependency_overrides.pop(get_now, None)


@pytest_asyncio.fixture
async def db():
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def monitor_id(client: AsyncClient) -> str:
    """Create a monitor through the API and return its id."""
    response = await client.post("/api/monitors", json={
        "name": "Nightly backup",
        "schedule": "Every 5 minutes",
        "grace_minutes": 10,
    })
    assert response.status_code == 201
    return response.json()["id"]
