"""Database base configuration for SQLAlchemy with SQLModel.

This module provides base database configuration for async SQLAlchemy.
It includes:
- Engine configuration per environment and backend
- The Database object that owns the process-wide connection pool
- Health check functionality
"""

from typing import Any, AsyncGenerator, Dict, Optional
import asyncio
import logging
from contextlib import asynccontextmanager, nullcontext

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy.sql import text

from short_url_store.core.config import EnvironmentType, Settings, settings as default_settings

logger = logging.getLogger(__name__)


def get_engine_config(settings: Settings, url: str) -> Dict[str, Any]:
    """Get the appropriate engine configuration for the environment and backend.

    Args:
        settings: Store settings
        url: The SQLAlchemy database URL the engine will connect to

    Returns:
        Dict: Engine configuration parameters.
    """
    backend = make_url(url).get_backend_name()

    if backend == "sqlite":
        config: Dict[str, Any] = {
            "echo": settings.DB_ECHO,
            "connect_args": {"check_same_thread": False},
        }
        database = make_url(url).database
        if not database or database == ":memory:":
            # Every connection to an in-memory database sees a different database
            config["poolclass"] = StaticPool
        return config

    if settings.ENVIRONMENT == EnvironmentType.TESTING:
        return {
            "echo": settings.DB_ECHO,
            "poolclass": NullPool,  # Use NullPool for tests to avoid connection issues
        }

    return {
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_POOL_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


class Database:
    """Owner of the async engine and the session factory bound to it.

    Constructed once at process bootstrap and handed to every store that
    needs it. The engine's pool is shared by all operations of the process.

    A StaticPool hands the same connection to every checkout, so concurrent
    transactions would interleave on it. Checkouts on such an engine are
    serialized: each session or connection holds the lock until it closes.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._checkout_lock: Optional[asyncio.Lock] = None
        if isinstance(engine.sync_engine.pool, StaticPool):
            self._checkout_lock = asyncio.Lock()
        self.session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    @classmethod
    def from_url(cls, url: str, **engine_kwargs: Any) -> "Database":
        return cls(create_async_engine(url, **engine_kwargs))

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    @property
    def serializes_checkout(self) -> bool:
        return self._checkout_lock is not None

    def _checkout(self):
        return self._checkout_lock if self._checkout_lock is not None else nullcontext()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get async session with proper cleanup.

        Yields:
            AsyncSession: SQLAlchemy async session
        """
        async with self._checkout():
            session = self.session_factory()
            try:
                yield session
            finally:
                await session.close()

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[AsyncConnection, None]:
        """Get a connection inside a transaction committed on exit.

        Yields:
            AsyncConnection: SQLAlchemy async connection
        """
        async with self._checkout():
            async with self.engine.begin() as conn:
                yield conn

    async def ping(self) -> Dict[str, Any]:
        """Check database connectivity and return status.

        Returns:
            Dict: Health check result containing status and latency information
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status = "healthy"
        error_message = None
        latency_ms = 0

        try:
            async with self._checkout(), self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = int((loop.time() - start_time) * 1000)
        except Exception as e:
            status = "unhealthy"
            error_message = str(e)
            logger.error(f"Database health check failed: {e}")

        return {
            "status": status,
            "latency_ms": latency_ms,
            "error": error_message,
        }

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()


def create_database(settings: Optional[Settings] = None) -> Database:
    """Create the Database for the configured backend.

    Args:
        settings: Store settings, defaults to the environment-loaded settings

    Returns:
        Database: Database owning a configured async engine

    Raises:
        ValueError: If the configured backend has no database URL
    """
    settings = settings or default_settings
    url = settings.SQLALCHEMY_DATABASE_URI
    if not url:
        raise ValueError(f"Store backend {settings.STORE_BACKEND.value!r} does not use a database")

    engine_config = get_engine_config(settings, url)
    logger.info(f"Creating database engine with URL: {make_url(url).render_as_string(hide_password=True)}")

    return Database.from_url(url, **engine_config)
