"""Service layer for the short URL store.

Services orchestrate several store operations into one maintenance task.
"""

from short_url_store.services.cleanup import CleanupService
from short_url_store.services.exceptions import (
    ServiceError,
    CleanupError,
    ExpiredUrlCleanupError,
)

__all__ = ["CleanupService", "ServiceError", "CleanupError", "ExpiredUrlCleanupError"]
