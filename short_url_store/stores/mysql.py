"""MySQL store for short URLs (aiomysql driver)."""

from sqlalchemy.exc import IntegrityError

from short_url_store.stores.sql import SqlShortUrlStore

# ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062


class MysqlShortUrlStore(SqlShortUrlStore):
    """Short URL store backed by MySQL or MariaDB."""

    name = "mysql"

    def is_unique_violation(self, error: IntegrityError) -> bool:
        args = getattr(error.orig, "args", ())
        return bool(args) and args[0] == MYSQL_DUPLICATE_ENTRY
