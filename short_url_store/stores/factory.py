"""
Store factory: select the store backend from configuration.

This module centralizes selection of the store backend so the rest of the
process only sees the ShortUrlStore contract. The selection happens once at
bootstrap; the Database owning the connection pool is passed in explicitly.
"""

from typing import Callable, Dict, Optional, Tuple, Type
import logging

from short_url_store.core.config import Settings, StoreBackend, settings as default_settings
from short_url_store.db.base import Database
from short_url_store.models.short_url import now_micros
from short_url_store.stores.base import ShortUrlStore
from short_url_store.stores.memory import MemoryShortUrlStore
from short_url_store.stores.mysql import MysqlShortUrlStore
from short_url_store.stores.postgres import PostgresShortUrlStore
from short_url_store.stores.sql import SqlShortUrlStore
from short_url_store.stores.sqlite import SqliteShortUrlStore

logger = logging.getLogger(__name__)

SQL_STORES: Dict[StoreBackend, Type[SqlShortUrlStore]] = {
    StoreBackend.SQLITE: SqliteShortUrlStore,
    StoreBackend.POSTGRES: PostgresShortUrlStore,
    StoreBackend.MYSQL: MysqlShortUrlStore,
}

# SQLAlchemy dialect names each SQL backend accepts
DIALECTS: Dict[StoreBackend, Tuple[str, ...]] = {
    StoreBackend.SQLITE: ("sqlite",),
    StoreBackend.POSTGRES: ("postgresql",),
    StoreBackend.MYSQL: ("mysql", "mariadb"),
}


def create_store(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    clock: Callable[[], int] = now_micros,
) -> ShortUrlStore:
    """
    Return the ShortUrlStore configured by settings.

    Args:
        settings: Store settings; STORE_BACKEND picks the implementation
        database: Database for SQL backends, ignored by the memory backend
        clock: Microsecond clock used to stamp created_ts

    Returns:
        ShortUrlStore implementation for the configured backend

    Raises:
        ValueError: If a SQL backend is selected without a database, or the
            database speaks a different dialect
    """
    settings = settings or default_settings
    backend = settings.STORE_BACKEND

    logger.info(f"Selected short URL store backend: {backend.value!r}")

    if backend == StoreBackend.MEMORY:
        return MemoryShortUrlStore(clock=clock)

    store_class = SQL_STORES[backend]
    if database is None:
        raise ValueError(f"A database is required for the {backend.value!r} store backend")
    if database.dialect_name not in DIALECTS[backend]:
        raise ValueError(
            f"Store backend {backend.value!r} cannot use a {database.dialect_name!r} database"
        )

    return store_class(database, clock=clock)
