"""Database connection retry for startup.

Bootstrap waits for the database with exponential backoff before applying
the schema, so a store process can come up before its database does.
"""

import asyncio
import logging
import random
from typing import Optional

from short_url_store.core.config import Settings, settings as default_settings
from short_url_store.db.base import Database

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, initial_delay: float, max_delay: float, jitter_factor: float) -> float:
    """Return the sleep time before retrying after the given failed attempt (1-based)."""
    delay = min(initial_delay * (2 ** (attempt - 1)), max_delay)
    jitter = delay * jitter_factor
    if jitter > 0:
        return max(0.0, delay + random.uniform(-jitter, jitter))
    return delay


async def wait_for_database(database: Database, settings: Optional[Settings] = None) -> bool:
    """Wait for the database with retry and exponential backoff.

    Attempts to run a trivial query. If it fails, retries with exponential
    backoff until the configured number of attempts is exhausted.

    Args:
        database: The database to probe
        settings: Store settings holding the retry configuration

    Returns:
        bool: True if connection was successful, False otherwise
    """
    settings = settings or default_settings
    max_attempts = max(1, settings.DB_CONNECT_RETRY_ATTEMPTS)

    logger.info(f"Initializing database connection (max attempts: {max_attempts})")

    for attempt in range(1, max_attempts + 1):
        result = await database.ping()
        if result["status"] == "healthy":
            logger.info(f"Database connection established successfully on attempt {attempt}")
            return True

        if attempt < max_attempts:
            backoff_time = backoff_delay(
                attempt,
                settings.DB_CONNECT_RETRY_INITIAL_DELAY,
                settings.DB_CONNECT_RETRY_MAX_DELAY,
                settings.DB_CONNECT_RETRY_JITTER,
            )
            logger.warning(
                f"Database connection attempt {attempt}/{max_attempts} failed: {result['error']}. "
                f"Retrying in {backoff_time:.2f} seconds..."
            )
            await asyncio.sleep(backoff_time)
        else:
            logger.error(
                f"Failed to connect to database after {max_attempts} attempts. "
                f"Last error: {result['error']}"
            )

    return False
