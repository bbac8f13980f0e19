"""Store layer for the short URL store.

This package provides the ShortUrlStore contract, its backend
implementations, and the factory that picks one from configuration.
"""

from short_url_store.stores.base import (
    ShortUrlStore,
    StoreError,
    SchemaError,
    UniqueViolation,
    NotFound,
)
from short_url_store.stores.memory import MemoryShortUrlStore
from short_url_store.stores.sql import SqlShortUrlStore
from short_url_store.stores.sqlite import SqliteShortUrlStore
from short_url_store.stores.postgres import PostgresShortUrlStore
from short_url_store.stores.mysql import MysqlShortUrlStore
from short_url_store.stores.factory import create_store

__all__ = [
    # Contract and exceptions
    "ShortUrlStore",
    "StoreError",
    "SchemaError",
    "UniqueViolation",
    "NotFound",

    # Concrete stores
    "MemoryShortUrlStore",
    "SqlShortUrlStore",
    "SqliteShortUrlStore",
    "PostgresShortUrlStore",
    "MysqlShortUrlStore",

    "create_store",
]
