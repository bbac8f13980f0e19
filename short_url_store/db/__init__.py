"""Database module for the short URL store."""
from short_url_store.db.base import Database, create_database, get_engine_config
from short_url_store.db.resilience import wait_for_database

__all__ = [
    "Database",
    "create_database",
    "get_engine_config",
    "wait_for_database",
]
