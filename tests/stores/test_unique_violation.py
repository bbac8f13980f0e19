"""Tests for recognising duplicate short ids in driver errors."""

import sqlite3

import pytest
from unittest.mock import MagicMock
from sqlalchemy.exc import IntegrityError

from short_url_store.db.base import Database
from short_url_store.stores.base import StoreError, UniqueViolation
from short_url_store.stores.mysql import MysqlShortUrlStore
from short_url_store.stores.postgres import PostgresShortUrlStore
from short_url_store.stores.sql import SqlShortUrlStore
from short_url_store.stores.sqlite import SqliteShortUrlStore


class FakeAsyncpgError(Exception):
    """Stand-in for the asyncpg adapter error carrying a SQLSTATE."""

    def __init__(self, message: str, sqlstate: str):
        super().__init__(message)
        self.sqlstate = sqlstate


class FakePyMySQLError(Exception):
    """Stand-in for pymysql's IntegrityError, whose first arg is the error code."""


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO short_urls ...", {}, orig)


@pytest.fixture
def database():
    return MagicMock(spec=Database)


@pytest.mark.repository
class TestUniqueViolationDetection:
    """Each dialect store maps only its own duplicate-key error."""

    def test_sqlite_unique_constraint(self, database):
        store = SqliteShortUrlStore(database)

        assert store.is_unique_violation(
            integrity_error(sqlite3.IntegrityError("UNIQUE constraint failed: short_urls.short_id"))
        )
        assert not store.is_unique_violation(
            integrity_error(sqlite3.IntegrityError("NOT NULL constraint failed: short_urls.original_url"))
        )

    def test_postgres_sqlstate(self, database):
        store = PostgresShortUrlStore(database)

        assert store.is_unique_violation(
            integrity_error(FakeAsyncpgError("duplicate key value violates unique constraint", "23505"))
        )
        assert not store.is_unique_violation(
            integrity_error(FakeAsyncpgError("null value in column violates not-null constraint", "23502"))
        )

    def test_postgres_message_without_sqlstate(self, database):
        store = PostgresShortUrlStore(database)

        assert store.is_unique_violation(
            integrity_error(Exception('duplicate key value violates unique constraint "short_urls_short_id_idx"'))
        )

    def test_mysql_error_code(self, database):
        store = MysqlShortUrlStore(database)

        assert store.is_unique_violation(
            integrity_error(FakePyMySQLError(1062, "Duplicate entry 'abc123' for key 'short_urls_short_id_idx'"))
        )
        assert not store.is_unique_violation(
            integrity_error(FakePyMySQLError(1048, "Column 'original_url' cannot be null"))
        )
        assert not store.is_unique_violation(integrity_error(FakePyMySQLError()))

    def test_generic_sql_store_matches_common_wording(self, database):
        store = SqlShortUrlStore(database)

        assert store.is_unique_violation(integrity_error(Exception("Duplicate entry 'x'")))
        assert not store.is_unique_violation(integrity_error(Exception("foreign key mismatch")))

    @pytest.mark.asyncio
    async def test_other_integrity_errors_become_store_error(self, sqlite_store):
        """Test a non-unique integrity failure is not reported as a duplicate."""
        with pytest.raises(StoreError) as excinfo:
            await sqlite_store.add("abc123", None)

        assert not isinstance(excinfo.value, UniqueViolation)
        assert isinstance(excinfo.value.__cause__, IntegrityError)
