"""Test fixtures for the short URL store."""

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from short_url_store.core.config import Settings
from short_url_store.db.base import Database
from short_url_store.stores.memory import MemoryShortUrlStore
from short_url_store.stores.sqlite import SqliteShortUrlStore
from tests.utils import FakeClock


# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_test_database() -> Database:
    """Create an isolated in-memory SQLite database."""
    return Database.from_url(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def clock() -> FakeClock:
    """Deterministic microsecond clock, strictly increasing by default."""
    return FakeClock()


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an in-memory SQLite store without retries."""
    return Settings(
        ENVIRONMENT="testing",
        STORE_BACKEND="sqlite",
        SQLITE_PATH=":memory:",
        DB_CONNECT_RETRY_ATTEMPTS=1,
        LOG_LEVEL="WARNING",
        LOG_TO_FILE=False,
        SHORT_URL_TTL_SECONDS=0,
    )


@pytest_asyncio.fixture
async def test_database():
    """Create test database with in-memory SQLite."""
    database = make_test_database()
    yield database
    await database.dispose()


@pytest_asyncio.fixture
async def sqlite_store(test_database, clock) -> SqliteShortUrlStore:
    """SQLite store with its schema applied."""
    store = SqliteShortUrlStore(test_database, clock=clock)
    await store.ensure_schema()
    return store


@pytest_asyncio.fixture
async def unmigrated_store(test_database, clock) -> SqliteShortUrlStore:
    """SQLite store whose table was never created, so every query fails."""
    return SqliteShortUrlStore(test_database, clock=clock)


@pytest.fixture
def memory_store(clock) -> MemoryShortUrlStore:
    return MemoryShortUrlStore(clock=clock)


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def store(request, clock):
    """Every backend that can run without a server, for contract tests."""
    if request.param == "memory":
        yield MemoryShortUrlStore(clock=clock)
        return

    database = make_test_database()
    sqlite_store = SqliteShortUrlStore(database, clock=clock)
    await sqlite_store.ensure_schema()
    yield sqlite_store
    await database.dispose()
