"""Core module for the short URL store."""

from short_url_store.core.config import settings, Settings, StoreBackend, EnvironmentType
from short_url_store.core.logging import setup_logging

__all__ = ["settings", "Settings", "StoreBackend", "EnvironmentType", "setup_logging"]
