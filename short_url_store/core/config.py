"""Store configuration module.

This module contains settings for the short URL store, loaded from
environment variables with appropriate defaults.
"""

from __future__ import annotations

from typing import Optional, Any
from enum import Enum

from pydantic import field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class EnvironmentType(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    SQLITE = "sqlite"
    POSTGRES = "postgres"
    MYSQL = "mysql"


class Settings(BaseSettings):
    """Store settings loaded from environment variables with defaults.

    Settings are loaded from environment variables, with fallback to
    values in .env file if present, and finally to the default values
    specified here.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment setting
    ENVIRONMENT: EnvironmentType = EnvironmentType.DEVELOPMENT

    # Store selection
    STORE_BACKEND: StoreBackend = StoreBackend.SQLITE
    DATABASE_URL: Optional[str] = None  # Explicit SQLAlchemy URL, overrides the computed one

    # SQLite settings
    SQLITE_PATH: str = "short_urls.db"  # ":memory:" for a throwaway database

    # PostgreSQL settings
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "short_urls"

    # MySQL settings
    MYSQL_SERVER: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_DB: str = "short_urls"

    # Connection pool settings (server databases only)
    DB_POOL_SIZE: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 300
    DB_ECHO: bool = False

    # Database connection resilience settings
    DB_CONNECT_RETRY_ATTEMPTS: int = 5  # Max number of connection attempts during startup
    DB_CONNECT_RETRY_INITIAL_DELAY: float = 1.0  # Initial delay in seconds
    DB_CONNECT_RETRY_MAX_DELAY: float = 30.0  # Maximum delay in seconds
    DB_CONNECT_RETRY_JITTER: float = 0.1  # Jitter factor (0.0-1.0) to add randomness to backoff

    # Expiration settings
    SHORT_URL_TTL_SECONDS: int = 0  # 0 means never expire
    CLEANUP_BATCH_SIZE: int = 1000  # Number of short ids removed per batch
    CLEANUP_INTERVAL_SECONDS: int = 3600  # How often the expiration sweep runs
    CLEANUP_START_ON_STARTUP: bool = False  # Whether to sweep once right after startup

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_FILENAME: str = "short_url_store.log"
    LOG_ROTATION: str = "10 MB"
    LOG_RETENTION: str = "7 days"
    LOG_FORMAT: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {name} | {message}"
    LOG_JSON: bool = False
    LOG_TO_FILE: bool = False

    # Validators
    @field_validator("STORE_BACKEND", mode="before")
    def normalize_backend(cls, v: Any) -> Any:
        """Accept backend names in any case and the common aliases."""
        if isinstance(v, str):
            v = v.strip().lower()
            aliases = {"postgresql": "postgres", "pg": "postgres", "sqlite3": "sqlite", "mariadb": "mysql"}
            return aliases.get(v, v)
        return v

    @field_validator("DATABASE_URL", mode="before")
    def empty_url_to_none(cls, v: Any) -> Optional[str]:
        """Convert empty string to None for DATABASE_URL."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("SHORT_URL_TTL_SECONDS")
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("CLEANUP_BATCH_SIZE", "CLEANUP_INTERVAL_SECONDS")
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    # Computed fields
    @computed_field
    def SQLALCHEMY_DATABASE_URI(self) -> Optional[str]:
        """Construct the async SQLAlchemy URI for the selected backend or use override."""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.STORE_BACKEND == StoreBackend.SQLITE:
            return f"sqlite+aiosqlite:///{self.SQLITE_PATH}"
        if self.STORE_BACKEND == StoreBackend.POSTGRES:
            url = URL.create(
                "postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_SERVER,
                port=self.POSTGRES_PORT,
                database=self.POSTGRES_DB,
            )
            return url.render_as_string(hide_password=False)
        if self.STORE_BACKEND == StoreBackend.MYSQL:
            url = URL.create(
                "mysql+aiomysql",
                username=self.MYSQL_USER,
                password=self.MYSQL_PASSWORD,
                host=self.MYSQL_SERVER,
                port=self.MYSQL_PORT,
                database=self.MYSQL_DB,
            )
            return url.render_as_string(hide_password=False)

        # The memory backend has no database
        return None


# Create a singleton instance of the settings
settings = Settings()
