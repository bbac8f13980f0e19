"""PostgreSQL store for short URLs (asyncpg driver)."""

from sqlalchemy.exc import IntegrityError

from short_url_store.stores.sql import SqlShortUrlStore

# SQLSTATE unique_violation
PG_UNIQUE_VIOLATION = "23505"


class PostgresShortUrlStore(SqlShortUrlStore):
    """Short URL store backed by PostgreSQL."""

    name = "postgres"

    def is_unique_violation(self, error: IntegrityError) -> bool:
        orig = error.orig
        code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if code is not None:
            return code == PG_UNIQUE_VIOLATION
        return "duplicate key value violates unique constraint" in str(orig)
