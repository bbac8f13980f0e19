"""Tests for the SQL store on SQLite."""

import pytest
from unittest.mock import patch
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from short_url_store.db.base import Database
from short_url_store.stores.base import NotFound, SchemaError, StoreError
from short_url_store.stores.sqlite import SqliteShortUrlStore
from tests.utils import START_MICROS, random_url


@pytest.mark.repository
class TestSqlSchema:
    """Tests for schema creation."""

    @pytest.mark.asyncio
    async def test_table_and_indexes_created(self, sqlite_store, test_database):
        async with test_database.engine.connect() as conn:
            result = await conn.execute(
                text("SELECT name FROM sqlite_master WHERE type='table' AND name='short_urls'")
            )
            tables = [row[0] for row in result.fetchall()]

            result = await conn.execute(text("PRAGMA index_list('short_urls')"))
            indexes = {row[1]: row[2] for row in result.fetchall()}

        assert tables == ["short_urls"]
        assert indexes["short_urls_short_id_idx"] == 1  # unique
        assert indexes["short_urls_created_ts_idx"] == 0

    @pytest.mark.asyncio
    async def test_missing_index_is_recreated(self, sqlite_store, test_database):
        async with test_database.engine.begin() as conn:
            await conn.execute(text("DROP INDEX short_urls_created_ts_idx"))

        await sqlite_store.ensure_schema()

        async with test_database.engine.connect() as conn:
            result = await conn.execute(text("PRAGMA index_list('short_urls')"))
            names = {row[1] for row in result.fetchall()}
        assert "short_urls_created_ts_idx" in names

    @pytest.mark.asyncio
    async def test_schema_error_when_database_cannot_be_opened(self, clock):
        database = Database.from_url("sqlite+aiosqlite:////nonexistent-dir/missing/short_urls.db")
        store = SqliteShortUrlStore(database, clock=clock)

        try:
            with pytest.raises(SchemaError):
                await store.ensure_schema()
        finally:
            await database.dispose()


@pytest.mark.repository
class TestSqlRows:
    """Tests for the persisted row columns."""

    @pytest.mark.asyncio
    async def test_created_ts_comes_from_store_clock(self, sqlite_store, test_database):
        await sqlite_store.add("first", random_url())
        await sqlite_store.add("second", random_url())

        async with test_database.engine.connect() as conn:
            result = await conn.execute(
                text("SELECT short_id, created_ts FROM short_urls ORDER BY id")
            )
            rows = result.fetchall()

        assert [(row[0], row[1]) for row in rows] == [
            ("first", START_MICROS),
            ("second", START_MICROS + 1),
        ]

    @pytest.mark.asyncio
    async def test_surrogate_ids_are_never_reused(self, sqlite_store, test_database):
        await sqlite_store.add("a", random_url())
        await sqlite_store.add("b", random_url())
        await sqlite_store.remove("b")
        await sqlite_store.add("c", random_url())

        async with test_database.engine.connect() as conn:
            result = await conn.execute(text("SELECT short_id, id FROM short_urls ORDER BY id"))
            ids = {row[0]: row[1] for row in result.fetchall()}

        assert ids["c"] > ids["a"] + 1

    @pytest.mark.asyncio
    async def test_failed_duplicate_insert_leaves_no_row(self, sqlite_store, test_database):
        await sqlite_store.add("dup", "https://example.com/a")

        with pytest.raises(StoreError):
            await sqlite_store.add("dup", "https://example.com/b")

        async with test_database.engine.connect() as conn:
            result = await conn.execute(text("SELECT COUNT(*) FROM short_urls"))
            assert result.scalar() == 1


@pytest.mark.repository
class TestSqlErrorHandling:
    """Tests for error propagation and best-effort operations."""

    @pytest.mark.asyncio
    async def test_best_effort_operations_swallow_errors(self, unmigrated_store):
        """Test count, is_empty and clear report neutral results on failure."""
        assert await unmigrated_store.count() == 0
        assert await unmigrated_store.is_empty() is True
        await unmigrated_store.clear()

    @pytest.mark.asyncio
    async def test_data_operations_raise_store_error(self, unmigrated_store):
        """Test data operations surface backend failures."""
        operations = [
            lambda: unmigrated_store.add("abc123", random_url()),
            lambda: unmigrated_store.remove("abc123"),
            lambda: unmigrated_store.list(),
            lambda: unmigrated_store.contains("abc123"),
            lambda: unmigrated_store.get_expired(START_MICROS),
            lambda: unmigrated_store.batch_remove(["abc123"]),
        ]

        for operation in operations:
            with pytest.raises(StoreError) as excinfo:
                await operation()
            assert isinstance(excinfo.value.__cause__, SQLAlchemyError)

    @pytest.mark.asyncio
    async def test_get_failure_is_not_reported_as_not_found(self, unmigrated_store):
        with pytest.raises(StoreError) as excinfo:
            await unmigrated_store.get("abc123")

        assert not isinstance(excinfo.value, NotFound)

    @pytest.mark.asyncio
    async def test_batch_remove_empty_skips_backend(self, unmigrated_store):
        """Test an empty batch succeeds even when the backend is broken."""
        await unmigrated_store.batch_remove([])

    @pytest.mark.asyncio
    async def test_database_error_handling(self, sqlite_store):
        """Test handling of errors raised while executing a query."""
        await sqlite_store.add("errortest", random_url())

        with patch(
            "sqlalchemy.ext.asyncio.AsyncSession.execute",
            side_effect=SQLAlchemyError("Test database error"),
        ):
            with pytest.raises(StoreError) as excinfo:
                await sqlite_store.get("errortest")
            assert "Test database error" in str(excinfo.value)

            assert await sqlite_store.count() == 0

        assert await sqlite_store.count() == 1

    @pytest.mark.asyncio
    async def test_connection_error_is_store_error(self, sqlite_store):
        with patch(
            "sqlalchemy.ext.asyncio.AsyncSession.execute",
            side_effect=ConnectionResetError("connection lost"),
        ):
            with pytest.raises(StoreError):
                await sqlite_store.list()
