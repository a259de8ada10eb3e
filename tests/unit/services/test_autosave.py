"""Unit tests for DebouncedAutoSaver."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from b4_platform.services.autosave import DebouncedAutoSaver


@pytest.fixture
def save():
    return AsyncMock()


class TestDebouncedAutoSaver:

    @pytest.mark.asyncio
    async def test_burst_of_edits_writes_once_with_latest_payload(self, save):
        saver = DebouncedAutoSaver(save, delay=0.05)

        saver.schedule("idea-1", {"vision": "A"})
        saver.schedule("idea-1", {"vision": "AB"})
        saver.schedule("idea-1", {"vision": "ABC"})
        await asyncio.sleep(0.15)

        save.assert_awaited_once_with("idea-1", {"vision": "ABC"})
        assert saver.pending_keys == []

    @pytest.mark.asyncio
    async def test_keys_are_debounced_independently(self, save):
        saver = DebouncedAutoSaver(save, delay=0.05)

        saver.schedule("idea-1", {"vision": "one"})
        saver.schedule("idea-2", {"vision": "two"})
        await asyncio.sleep(0.15)

        assert save.await_count == 2

    @pytest.mark.asyncio
    async def test_nothing_written_before_delay(self, save):
        saver = DebouncedAutoSaver(save, delay=10)

        saver.schedule("idea-1", {"vision": "draft"})
        await asyncio.sleep(0)

        save.assert_not_awaited()
        assert saver.pending_keys == ["idea-1"]
        saver.close()

    @pytest.mark.asyncio
    async def test_flush_writes_pending_payloads_immediately(self, save):
        saver = DebouncedAutoSaver(save, delay=10)
        saver.schedule("idea-1", {"vision": "draft"})

        written = await saver.flush()

        assert written == 1
        save.assert_awaited_once_with("idea-1", {"vision": "draft"})
        assert saver.pending_keys == []

    @pytest.mark.asyncio
    async def test_close_drops_pending_payloads(self, save):
        saver = DebouncedAutoSaver(save, delay=0.05)
        saver.schedule("idea-1", {"vision": "draft"})

        saver.close()
        await asyncio.sleep(0.1)

        save.assert_not_awaited()
        assert saver.pending_keys == []

    @pytest.mark.asyncio
    async def test_failed_save_is_logged_not_raised(self, save):
        save.side_effect = RuntimeError("database unavailable")
        saver = DebouncedAutoSaver(save, delay=10)
        saver.schedule("idea-1", {"vision": "draft"})

        assert await saver.flush() == 1
        save.assert_awaited_once()

    def test_negative_delay_rejected(self, save):
        with pytest.raises(ValueError):
            DebouncedAutoSaver(save, delay=-1)
