"""In-memory cache stores."""

from __future__ import annotations

from collections import OrderedDict
from typing import Any

DEFAULT_MAX_SIZE = 500
DEFAULT_QUERY_TTL = 60.0


class SimpleCache:
    """Least-recently-used in-memory store.

    Args:
        max_size: Entries kept before the least recently used is evicted
        default_query_ttl: TTL in seconds for query entries without their own
        cache_records: Whether single records are cached
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        *,
        default_query_ttl: float = DEFAULT_QUERY_TTL,
        cache_records: bool = True,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.default_query_ttl = default_query_ttl
        self.cache_records = cache_records
        self._entries: OrderedDict[str, Any] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any | None:
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    async def set(self, key: str, value: Any) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_size:
            self._entries.popitem(last=False)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def get_all(self) -> dict[str, Any]:
        return dict(self._entries)

    async def clear(self, prefix: str | None = None) -> None:
        if prefix is None:
            self._entries.clear()
            return
        for key in [key for key in self._entries if key.startswith(prefix)]:
            del self._entries[key]


class NoCache:
    """Store that never holds anything."""

    cache_records = False
    default_query_ttl = -1.0

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None

    async def get_all(self) -> dict[str, Any]:
        return {}

    async def clear(self, prefix: str | None = None) -> None:
        return None
