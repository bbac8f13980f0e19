"""Short URL store: backend-agnostic persistence for short URL records."""

from short_url_store.models.short_url import ShortUrlRecord
from short_url_store.stores import (
    ShortUrlStore,
    StoreError,
    SchemaError,
    UniqueViolation,
    NotFound,
    create_store,
)

__version__ = "0.1.0"

__all__ = [
    "ShortUrlRecord",
    "ShortUrlStore",
    "StoreError",
    "SchemaError",
    "UniqueViolation",
    "NotFound",
    "create_store",
]
