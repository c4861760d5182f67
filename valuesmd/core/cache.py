from __future__ import annotations

import asyncio
from collections import OrderedDict
from typing import Awaitable, Callable, Generic, Hashable, Optional, Tuple, TypeVar

T = TypeVar("T")


class WriteOnceCache(Generic[T]):
    """Async cache whose entries are published once and never replaced.

    ``get_or_compute`` runs the producer outside the lock and publishes the
    finished value under it; readers only ever see complete entries. If two
    callers race on the same key, the first publication wins and the second
    result is discarded.
    """

    def __init__(self, max_entries: int = 256):
        self._entries: "OrderedDict[Hashable, T]" = OrderedDict()
        self._lock = asyncio.Lock()
        self._max = max(1, max_entries)

    async def get(self, key: Hashable) -> Optional[T]:
        async with self._lock:
            return self._entries.get(key)

    async def publish(self, key: Hashable, value: T) -> T:
        async with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                return existing
            self._entries[key] = value
            while len(self._entries) > self._max:
                self._entries.popitem(last=False)
            return value

    async def get_or_compute(self, key: Hashable, producer: Callable[[], Awaitable[T]]) -> Tuple[T, bool]:
        """Return ``(value, was_cached)``."""
        cached = await self.get(key)
        if cached is not None:
            return cached, True
        value = await producer()
        return await self.publish(key, value), False

    async def clear(self):
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
