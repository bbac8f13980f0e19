"""
In-memory store for short URLs.

This is a reference implementation of the ShortUrlStore contract kept in a
plain dict. It has the same uniqueness, ordering and expiry semantics as the
SQL stores and keeps unit tests and local development free of a database.

Each operation mutates the dict without awaiting in between, so on a single
event loop concurrent adds of the same short id cannot both succeed.
"""

import itertools
import logging
from typing import Callable, Dict, Iterable, List, Optional

from short_url_store.models.short_url import ShortUrl, ShortUrlRecord, now_micros
from short_url_store.stores.base import (
    NotFound,
    ShortUrlStore,
    UniqueViolation,
    validate_limit,
    validate_short_id,
)

logger = logging.getLogger(__name__)


class MemoryShortUrlStore(ShortUrlStore):
    """Dict-backed implementation of the short URL store contract.

    Internal schema:
        self.rows = {short_id: ShortUrl(id, short_id, original_url, created_ts)}
    """

    name = "memory"

    def __init__(self, clock: Callable[[], int] = now_micros):
        super().__init__(clock)
        self.rows: Dict[str, ShortUrl] = {}
        # Surrogate ids are never reused, even after clear()
        self._ids = itertools.count(1)

    async def ensure_schema(self) -> None:
        return None

    async def add(self, short_id: str, original_url: str) -> None:
        validate_short_id(short_id)
        if short_id in self.rows:
            raise UniqueViolation(short_id)

        self.rows[short_id] = ShortUrl(
            id=next(self._ids),
            short_id=short_id,
            original_url=original_url,
            created_ts=self.clock(),
        )

    async def remove(self, short_id: str) -> None:
        self.rows.pop(short_id, None)

    async def get(self, short_id: str) -> ShortUrlRecord:
        row = self.rows.get(short_id)
        if row is None:
            raise NotFound(short_id)
        return row.to_record()

    async def list(self, limit: Optional[int] = None) -> List[ShortUrlRecord]:
        validate_limit(limit)
        rows = sorted(self.rows.values(), key=lambda r: (r.created_ts, r.id), reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [row.to_record() for row in rows]

    async def contains(self, short_id: str) -> bool:
        return short_id in self.rows

    async def count(self) -> int:
        return len(self.rows)

    async def clear(self) -> None:
        self.rows.clear()
        logger.info("[SHORT_URL] short_urls table cleared")

    async def get_expired(self, expired_before: int, limit: Optional[int] = None) -> List[str]:
        validate_limit(limit)
        expired = sorted(
            (row for row in self.rows.values() if row.created_ts < expired_before),
            key=lambda r: (r.created_ts, r.id),
        )
        if limit is not None:
            expired = expired[:limit]
        return [row.short_id for row in expired]

    async def batch_remove(self, short_ids: Iterable[str]) -> None:
        for short_id in list(short_ids):
            self.rows.pop(short_id, None)
