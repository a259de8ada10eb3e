"""Debounced auto-save.

Every keystroke in an idea phase form reaches the server as an auto-save
request. ``DebouncedAutoSaver`` keeps one timer per key: a new payload
cancels the pending timer and re-arms it, so a burst of edits produces a
single write carrying the latest payload.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional, Tuple

from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)

SaveCallback = Callable[[Hashable, Any], Awaitable[Any]]


class DebouncedAutoSaver:
    """Per-key debounce of an async save callback."""

    def __init__(self, save: SaveCallback, delay: float = 1.0):
        if delay < 0:
            raise ValueError("delay must not be negative")
        self._save = save
        self.delay = delay
        self._pending: Dict[Hashable, Tuple[asyncio.Task, Any]] = {}

    @property
    def pending_keys(self) -> list:
        return list(self._pending)

    def schedule(self, key: Hashable, payload: Any) -> None:
        """Replace any pending save for ``key`` and restart its timer."""
        self._cancel(key)
        task = asyncio.create_task(self._fire_later(key, payload))
        self._pending[key] = (task, payload)

    def _cancel(self, key: Hashable) -> Optional[Any]:
        entry = self._pending.pop(key, None)
        if entry is None:
            return None
        task, payload = entry
        task.cancel()
        return payload

    async def _fire_later(self, key: Hashable, payload: Any) -> None:
        await asyncio.sleep(self.delay)
        current = self._pending.get(key)
        # A newer schedule() owns the key now
        if current is None or current[0] is not asyncio.current_task():
            return
        del self._pending[key]
        await self._run(key, payload)

    async def _run(self, key: Hashable, payload: Any) -> None:
        try:
            await self._save(key, payload)
        except Exception as e:
            LOGGER.error(f"Auto-save failed for {key}: {str(e)}", exc_info=True)

    async def flush(self) -> int:
        """Save every pending payload now.

        Returns:
            Number of payloads written
        """
        keys = list(self._pending)
        for key in keys:
            payload = self._cancel(key)
            await self._run(key, payload)
        if keys:
            LOGGER.info(f"Flushed {len(keys)} pending auto-saves")
        return len(keys)

    def close(self) -> None:
        """Drop every pending save without writing."""
        for key in list(self._pending):
            self._cancel(key)
