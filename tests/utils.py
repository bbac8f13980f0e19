"""Test utilities for short URL store tests."""

import random
import string

START_MICROS = 1_700_000_000_000_000


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


class FakeClock:
    """Microsecond clock that advances by `step` on every reading."""

    def __init__(self, start: int = START_MICROS, step: int = 1):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value

    def advance(self, micros: int) -> None:
        self.now += micros


async def add_urls(store, count: int, prefix: str = "id"):
    """Add `count` short URLs and return their short ids in insertion order."""
    short_ids = [f"{prefix}{i}" for i in range(count)]
    for short_id in short_ids:
        await store.add(short_id, random_url())
    return short_ids
