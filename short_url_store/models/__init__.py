"""
Data models for the short URL store.

This module imports and exports all SQLModel models used by the store.
"""

from short_url_store.models.short_url import (
    SHORT_ID_MAX_LENGTH,
    ShortUrl,
    ShortUrlRecord,
    now_micros,
)

__all__ = [
    "SHORT_ID_MAX_LENGTH",
    "ShortUrl",
    "ShortUrlRecord",
    "now_micros",
]
