"""Pytest configuration shared by all test layers.

This configuration ensures:
1. Tests run with ENVIRONMENT=testing against in-memory SQLite
2. Every guard gets a controllable clock (no sleeping, no patching time)
3. Integration tests get a fresh database per test
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

import inspect
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from src.infrastructure.persistence.database import Database

START_TIME = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to.

    Usage:
        clock = FakeClock()
        limiter = InMemoryRateLimiter(policies=policies, logger=logger, clock=clock)
        clock.advance(seconds=901)
    """

    def __init__(self, start: datetime = START_TIME) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, *, seconds: float = 0, minutes: float = 0) -> datetime:
        self.now += timedelta(seconds=seconds, minutes=minutes)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """Fresh clock pinned to START_TIME."""
    return FakeClock()


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double satisfying LoggerProtocol."""
    return MagicMock()


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory SQLite database with every table created.

    One shared connection (StaticPool), so each repository session sees the
    same data.
    """
    db = Database(database_url="sqlite+aiosqlite://")
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def session_factory(database: Database):
    """The database's session factory, as repositories receive it."""
    return database.session_factory


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with real database"
    )
    config.addinivalue_line("markers", "api: HTTP tests through the FastAPI app")


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if inspect.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
