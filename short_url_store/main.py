"""Process bootstrap for the short URL store.

This module builds the process-wide Database, selects the store backend,
applies the schema, and runs the expiration sweep on a schedule.

Example:
    ```python
    async with lifespan() as runtime:
        await runtime.store.add("abc123", "https://example.com/a")
        record = await runtime.store.get("abc123")
    ```
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncGenerator, Optional
import logging

from short_url_store.core.config import Settings, StoreBackend, settings as default_settings
from short_url_store.core.logging import setup_logging
from short_url_store.db.base import Database, create_database
from short_url_store.db.resilience import wait_for_database
from short_url_store.scheduler.scheduler import SchedulerService
from short_url_store.services.cleanup import CleanupService
from short_url_store.stores.base import ShortUrlStore, StoreError
from short_url_store.stores.factory import create_store

logger = logging.getLogger(__name__)


@dataclass
class StoreRuntime:
    """Everything bootstrap wires together for one process."""

    store: ShortUrlStore
    database: Optional[Database]
    cleanup_service: CleanupService
    scheduler: Optional[SchedulerService] = None


async def init_store(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> ShortUrlStore:
    """
    Build the configured store and make sure its schema exists.

    Args:
        settings: Store settings
        database: Already-created database; created from settings if omitted

    Returns:
        ShortUrlStore ready to serve requests

    Raises:
        StoreError: If the database stays unreachable
        SchemaError: If the schema cannot be applied
    """
    settings = settings or default_settings

    if settings.STORE_BACKEND != StoreBackend.MEMORY:
        owns_database = database is None
        database = database or create_database(settings)
        if not await wait_for_database(database, settings):
            if owns_database:
                await database.dispose()
            raise StoreError("Database is unreachable, giving up")

    store = create_store(settings, database)
    await store.ensure_schema()
    logger.info(f"Short URL store ready (backend={store.name})")
    return store


@asynccontextmanager
async def lifespan(settings: Optional[Settings] = None) -> AsyncGenerator[StoreRuntime, None]:
    """
    Run the store for the lifetime of the context.

    Logging is configured, the store is initialized, and when a TTL is set
    the expiration sweep is scheduled. On exit the scheduler stops and the
    connection pool is disposed.
    """
    settings = settings or default_settings
    setup_logging(settings)

    database = None
    if settings.STORE_BACKEND != StoreBackend.MEMORY:
        database = create_database(settings)

    try:
        store = await init_store(settings, database)
        cleanup_service = CleanupService(
            store,
            ttl_seconds=settings.SHORT_URL_TTL_SECONDS,
            batch_size=settings.CLEANUP_BATCH_SIZE,
        )
        runtime = StoreRuntime(store=store, database=database, cleanup_service=cleanup_service)

        if cleanup_service.enabled:
            runtime.scheduler = SchedulerService(cleanup_service, settings)
            runtime.scheduler.start()

        try:
            yield runtime
        finally:
            if runtime.scheduler is not None:
                runtime.scheduler.shutdown()
    finally:
        if database is not None:
            await database.dispose()
        logger.info("Short URL store shut down")
