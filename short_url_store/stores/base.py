"""Base store implementation for the short URL store.

This module defines the ShortUrlStore contract that every backend implements
identically, and the exceptions that cross the store boundary.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional

from short_url_store.models.short_url import SHORT_ID_MAX_LENGTH, ShortUrlRecord, now_micros


class StoreError(Exception):
    """Base exception for store errors (transport or driver failures)."""
    pass


class SchemaError(StoreError):
    """Exception raised when the schema cannot be applied."""
    pass


class UniqueViolation(StoreError):
    """Exception raised when a short id is already taken."""

    def __init__(self, short_id: str):
        self.short_id = short_id
        super().__init__(f"ShortUrl with short_id={short_id} already exists")


class NotFound(StoreError):
    """Exception raised when no row matches a point lookup."""

    def __init__(self, short_id: str):
        self.short_id = short_id
        super().__init__(f"ShortUrl with short_id={short_id} not found")


def validate_short_id(short_id: str) -> None:
    """Reject short ids that can never be stored."""
    if not short_id:
        raise ValueError("short_id must not be empty")
    if len(short_id) > SHORT_ID_MAX_LENGTH:
        raise ValueError(f"short_id must be at most {SHORT_ID_MAX_LENGTH} characters")


def validate_limit(limit: Optional[int]) -> None:
    if limit is not None and limit < 1:
        raise ValueError(f"limit must be a positive integer, got {limit}")


class ShortUrlStore(ABC):
    """
    Storage contract for short URL records.

    Every backend implements the same operations with the same semantics.
    Data operations raise StoreError subclasses; count, is_empty and clear
    are best-effort and never raise, they log and return a neutral value.

    Args:
        clock: Callable returning the current time in microseconds since the
            epoch, used to stamp created_ts on insert
    """

    name = "base"

    def __init__(self, clock: Callable[[], int] = now_micros):
        self.clock = clock

    @abstractmethod
    async def ensure_schema(self) -> None:
        """
        Create the backing table and its indexes if absent.

        Safe to call on every startup.

        Raises:
            SchemaError: If the schema cannot be applied
        """

    @abstractmethod
    async def add(self, short_id: str, original_url: str) -> None:
        """
        Insert a new short URL stamped with the store clock.

        Args:
            short_id: Unique key, 1 to 32 characters
            original_url: Redirect target, stored verbatim

        Raises:
            UniqueViolation: If the short id already exists
            StoreError: On other backend errors
        """

    @abstractmethod
    async def remove(self, short_id: str) -> None:
        """Delete the row for short_id, succeeding when there is none."""

    @abstractmethod
    async def get(self, short_id: str) -> ShortUrlRecord:
        """
        Look up a short URL.

        Raises:
            NotFound: If no row matches
            StoreError: On other backend errors
        """

    @abstractmethod
    async def list(self, limit: Optional[int] = None) -> List[ShortUrlRecord]:
        """
        List records newest first.

        Args:
            limit: Maximum number of records to return, None for all

        Returns:
            Records ordered by creation time descending
        """

    @abstractmethod
    async def contains(self, short_id: str) -> bool:
        """Return whether a row with that short id exists."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of rows, or 0 if the backend fails."""

    async def is_empty(self) -> bool:
        return await self.count() == 0

    @abstractmethod
    async def clear(self) -> None:
        """Delete every row. Failures are logged, never raised."""

    @abstractmethod
    async def get_expired(self, expired_before: int, limit: Optional[int] = None) -> List[str]:
        """
        Find short ids created strictly before a cutoff.

        Args:
            expired_before: Cutoff in microseconds since the epoch (exclusive)
            limit: Maximum number of ids to return, None for all

        Returns:
            Short ids, oldest first. Callers should not depend on the order.
        """

    @abstractmethod
    async def batch_remove(self, short_ids: Iterable[str]) -> None:
        """
        Delete every row whose short id is listed, in one request.

        An empty input returns without touching the backend.
        """
