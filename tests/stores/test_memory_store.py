"""Tests specific to the in-memory store."""

import pytest

from tests.utils import add_urls, random_url


@pytest.mark.repository
class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_ids_not_reused_after_clear(self, memory_store):
        await add_urls(memory_store, 3)
        await memory_store.clear()

        await memory_store.add("after", random_url())

        assert memory_store.rows["after"].id == 4

    @pytest.mark.asyncio
    async def test_rows_are_stamped_by_clock(self, memory_store, clock):
        start = clock.now

        await memory_store.add("a", random_url())
        await memory_store.add("b", random_url())

        assert memory_store.rows["a"].created_ts == start
        assert memory_store.rows["b"].created_ts == start + 1

    @pytest.mark.asyncio
    async def test_list_returns_copies(self, memory_store):
        """Test records handed out do not alias stored rows."""
        await memory_store.add("abc123", "https://example.com/a")

        record = (await memory_store.list())[0]
        record.original_url = "https://changed.example.com"

        assert (await memory_store.get("abc123")).original_url == "https://example.com/a"
