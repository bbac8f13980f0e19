"""SQL store for short URLs.

This module provides SqlShortUrlStore, the SQLAlchemy implementation of the
ShortUrlStore contract shared by every relational backend. Dialect subclasses
only decide which driver errors mean a unique-constraint violation.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Iterable, List, Optional
import logging

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from short_url_store.db.base import Database
from short_url_store.models.short_url import ShortUrl, ShortUrlRecord, now_micros
from short_url_store.stores.base import (
    NotFound,
    SchemaError,
    ShortUrlStore,
    StoreError,
    UniqueViolation,
    validate_limit,
    validate_short_id,
)

logger = logging.getLogger(__name__)

# Errors a driver may raise for a failed request
DRIVER_ERRORS = (SQLAlchemyError, OSError)


def _create_schema(connection) -> None:
    table = ShortUrl.__table__
    table.create(connection, checkfirst=True)
    # The table may predate one of its indexes
    for index in table.indexes:
        index.create(connection, checkfirst=True)


class SqlShortUrlStore(ShortUrlStore):
    """
    Short URL store over a SQLAlchemy async engine.

    Every operation checks out its own session from the shared pool and
    commits before returning, so writes are visible to all subsequent reads.

    Args:
        database: Process-wide database owning the engine and session factory
        clock: Microsecond clock used to stamp created_ts
    """

    name = "sql"

    def __init__(self, database: Database, clock: Callable[[], int] = now_micros):
        super().__init__(clock)
        self.database = database
        self.model_type = ShortUrl

    @property
    def log_prefix(self) -> str:
        return f"[{self.name.upper()}]"

    def is_unique_violation(self, error: IntegrityError) -> bool:
        """
        Tell whether an integrity error is a duplicate short id.

        Dialect stores override this with the driver's error codes; the
        generic check matches the wording common drivers use.
        """
        message = str(error.orig).lower()
        return "unique constraint" in message or "duplicate" in message

    def _store_error(self, action: str, error: Exception) -> StoreError:
        logger.error(f"{self.log_prefix} short_urls {action} error: {error}")
        return StoreError(f"Database error during short_urls {action}: {error}")

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.database.session() as session:
            async with session.begin():
                yield session

    async def ensure_schema(self) -> None:
        try:
            async with self.database.begin() as conn:
                await conn.run_sync(_create_schema)
        except DRIVER_ERRORS as e:
            logger.error(f"{self.log_prefix} short_urls schema error: {e}")
            raise SchemaError(f"Unable to create short_urls schema: {e}") from e
        logger.info(f"{self.log_prefix} short_urls schema ready")

    async def add(self, short_id: str, original_url: str) -> None:
        validate_short_id(short_id)
        row = self.model_type(
            short_id=short_id,
            original_url=original_url,
            created_ts=self.clock(),
        )
        try:
            async with self._transaction() as session:
                session.add(row)
        except IntegrityError as e:
            if self.is_unique_violation(e):
                raise UniqueViolation(short_id) from e
            raise self._store_error("add", e) from e
        except DRIVER_ERRORS as e:
            raise self._store_error("add", e) from e

    async def remove(self, short_id: str) -> None:
        stmt = (
            delete(self.model_type)
            .where(self.model_type.short_id == short_id)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._transaction() as session:
                await session.execute(stmt)
        except DRIVER_ERRORS as e:
            raise self._store_error("remove", e) from e

    async def get(self, short_id: str) -> ShortUrlRecord:
        query = select(
            self.model_type.short_id,
            self.model_type.original_url,
        ).where(self.model_type.short_id == short_id)
        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                row = result.one_or_none()
        except DRIVER_ERRORS as e:
            raise self._store_error("get", e) from e

        if row is None:
            raise NotFound(short_id)
        return ShortUrlRecord(short_id=row.short_id, original_url=row.original_url)

    async def list(self, limit: Optional[int] = None) -> List[ShortUrlRecord]:
        validate_limit(limit)
        query = select(
            self.model_type.short_id,
            self.model_type.original_url,
        ).order_by(desc(self.model_type.created_ts), desc(self.model_type.id))
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                rows = result.all()
        except DRIVER_ERRORS as e:
            raise self._store_error("list", e) from e

        return [ShortUrlRecord(short_id=row.short_id, original_url=row.original_url) for row in rows]

    async def contains(self, short_id: str) -> bool:
        query = select(self.model_type.id).where(self.model_type.short_id == short_id).limit(1)
        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                return result.first() is not None
        except DRIVER_ERRORS as e:
            raise self._store_error("contains", e) from e

    async def count(self) -> int:
        query = select(func.count()).select_from(self.model_type)
        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                return int(result.scalar_one())
        except Exception as e:
            logger.error(f"{self.log_prefix} short_urls len error: {e}")
            return 0

    async def clear(self) -> None:
        stmt = delete(self.model_type).execution_options(synchronize_session=False)
        try:
            async with self._transaction() as session:
                await session.execute(stmt)
        except Exception as e:
            logger.error(f"{self.log_prefix} short_urls table clear error: {e}")
        else:
            logger.info("[SHORT_URL] short_urls table cleared")

    async def get_expired(self, expired_before: int, limit: Optional[int] = None) -> List[str]:
        validate_limit(limit)
        query = (
            select(self.model_type.short_id)
            .where(self.model_type.created_ts < expired_before)
            .order_by(self.model_type.created_ts, self.model_type.id)
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            async with self.database.session() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except DRIVER_ERRORS as e:
            raise self._store_error("get_expired", e) from e

    async def batch_remove(self, short_ids: Iterable[str]) -> None:
        # Deduplicate while keeping the caller's order
        short_ids = list(dict.fromkeys(short_ids))
        if not short_ids:
            return

        stmt = (
            delete(self.model_type)
            .where(self.model_type.short_id.in_(short_ids))
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._transaction() as session:
                await session.execute(stmt)
        except DRIVER_ERRORS as e:
            raise self._store_error("batch_remove", e) from e
