"""Short URL data models.

This module defines the ShortUrl table model for persisted rows and the
ShortUrlRecord model handed back to callers.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Column, Index, Integer, String, Text
from sqlmodel import Field, SQLModel

SHORT_ID_MAX_LENGTH = 32


def now_micros() -> int:
    """Return the current UTC wall-clock time in microseconds since the epoch."""
    now = datetime.now(timezone.utc)
    return int(now.timestamp()) * 1_000_000 + now.microsecond


class ShortUrlRecord(SQLModel):
    """A short identifier and the original URL it redirects to."""

    short_id: str = Field(
        min_length=1,
        max_length=SHORT_ID_MAX_LENGTH,
        description="Unique lookup key of the short URL",
    )
    original_url: str = Field(
        description="The original (long) URL to redirect to"
    )


class ShortUrl(SQLModel, table=True):
    """
    Persisted short URL row.

    Besides the externally visible pair, each row carries a surrogate id and
    the creation timestamp assigned by the store. Rows are never updated in
    place; deletion is the only way a row disappears.
    """

    __tablename__ = "short_urls"

    # SQLite only auto-increments an INTEGER PRIMARY KEY
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            BigInteger().with_variant(Integer, "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
    )
    short_id: str = Field(sa_column=Column(String(SHORT_ID_MAX_LENGTH), nullable=False))
    original_url: str = Field(sa_column=Column(Text, nullable=False))
    created_ts: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Microseconds since the epoch, assigned at insert time",
    )

    __table_args__ = (
        Index("short_urls_short_id_idx", "short_id", unique=True),
        Index("short_urls_created_ts_idx", "created_ts"),
        # Without AUTOINCREMENT SQLite hands out the id of a deleted last row again
        {"sqlite_autoincrement": True},
    )

    def to_record(self) -> ShortUrlRecord:
        return ShortUrlRecord(short_id=self.short_id, original_url=self.original_url)
