"""SQLite store for short URLs (aiosqlite driver)."""

from sqlalchemy.exc import IntegrityError

from short_url_store.stores.sql import SqlShortUrlStore


class SqliteShortUrlStore(SqlShortUrlStore):
    """Short URL store backed by SQLite.

    Suited to single-process deployments and tests; an in-memory database
    must run on a StaticPool so every session sees the same data.
    """

    name = "sqlite"

    def is_unique_violation(self, error: IntegrityError) -> bool:
        # Python 3.11+ exposes the extended result code name
        if getattr(error.orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
            return True
        return "UNIQUE constraint failed" in str(error.orig)
