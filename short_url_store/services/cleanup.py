"""Cleanup service for the short URL store.

This module contains the CleanupService class which sweeps expired short
URLs out of a store: it asks the store for short ids older than the TTL
cutoff and removes them batch by batch.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from short_url_store.models.short_url import now_micros
from short_url_store.services.exceptions import ExpiredUrlCleanupError
from short_url_store.stores.base import ShortUrlStore, StoreError

logger = logging.getLogger(__name__)

MICROS_PER_SECOND = 1_000_000


class CleanupService:
    """
    Service for expiration sweeps over a short URL store.

    Args:
        store: Store to sweep
        ttl_seconds: Age after which a short URL expires; 0 disables expiry
        batch_size: Maximum number of short ids fetched and removed per batch
        clock: Microsecond clock used to compute the cutoff
    """

    def __init__(
        self,
        store: ShortUrlStore,
        ttl_seconds: int,
        batch_size: int = 1000,
        clock: Callable[[], int] = now_micros,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.batch_size = batch_size
        self.clock = clock

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def expiration_cutoff(self) -> int:
        """Return the created_ts before which short URLs are expired."""
        return self.clock() - self.ttl_seconds * MICROS_PER_SECOND

    async def cleanup_expired_urls(self) -> Dict[str, Any]:
        """
        Remove every short URL older than the TTL.

        Expired ids are fetched and removed in batches of batch_size until a
        batch comes back short. The cutoff is fixed at the start of the sweep.

        Returns:
            Dict with statistics about the cleanup operation

        Raises:
            ExpiredUrlCleanupError: If the store fails mid-sweep; batches
                removed before the failure stay removed
        """
        if not self.enabled:
            logger.debug("Expiration disabled, skipping cleanup")
            return {"processed": 0, "deleted": 0, "batches": 0, "cutoff": None, "execution_time": 0.0}

        start_time = time.monotonic()
        cutoff = self.expiration_cutoff()
        processed = 0
        batches = 0

        try:
            while True:
                expired = await self.store.get_expired(cutoff, limit=self.batch_size)
                if not expired:
                    break

                await self.store.batch_remove(expired)
                processed += len(expired)
                batches += 1

                if len(expired) < self.batch_size:
                    break
        except StoreError as e:
            logger.error(f"Error during expired URL cleanup after {processed} removals: {e}", exc_info=True)
            raise ExpiredUrlCleanupError(f"Failed to cleanup expired URLs: {str(e)}") from e

        execution_time = time.monotonic() - start_time
        logger.info(
            f"Cleanup completed: {processed} URLs deleted in {batches} batches in {execution_time:.2f}s"
        )

        return {
            "processed": processed,
            "deleted": processed,
            "batches": batches,
            "cutoff": cutoff,
            "execution_time": execution_time,
        }

    async def get_cleanup_stats(self) -> Dict[str, Any]:
        """
        Get statistics about data that needs cleanup.

        The expired count is capped at batch_size so the probe stays cheap.

        Returns:
            Dict with the pending expired count and the total number of rows

        Raises:
            ExpiredUrlCleanupError: If retrieval fails
        """
        expired_urls = 0
        if self.enabled:
            try:
                expired = await self.store.get_expired(self.expiration_cutoff(), limit=self.batch_size)
            except StoreError as e:
                logger.error(f"Error getting cleanup stats: {e}")
                raise ExpiredUrlCleanupError(f"Failed to get cleanup statistics: {str(e)}") from e
            expired_urls = len(expired)

        return {
            "expired_urls": expired_urls,
            "expired_urls_capped": expired_urls >= self.batch_size,
            "total_urls": await self.store.count(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
