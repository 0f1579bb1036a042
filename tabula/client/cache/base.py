"""Cache store protocol and cache entry helpers.

Architecture:
    Repositories talk to any object satisfying ``CacheStore``. Two kinds of
    entries share one store:
    - ``rec_<table>:<id>``: a single materialized record
    - ``query_<table>:<fingerprint>``: a ``QueryCacheEntry`` for one page

    Caching is best-effort. Invalidation reads the current entries and
    deletes the matching ones without a lock, so a racing write may leave a
    stale entry until its TTL runs out.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from ..models.metadata import RecordsMetadata

RECORD_PREFIX = "rec_"
QUERY_PREFIX = "query_"


@runtime_checkable
class CacheStore(Protocol):
    """Async key/value store used for record and query caching."""

    cache_records: bool
    default_query_ttl: float

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def get_all(self) -> dict[str, Any]: ...

    async def clear(self, prefix: str | None = None) -> None: ...


@dataclass(frozen=True)
class QueryCacheEntry:
    """Cached page of query results."""

    meta: RecordsMetadata
    records: tuple[Any, ...] = ()
    timestamp: float = field(default_factory=time.time)

    def is_fresh(self, ttl: float, now: float | None = None) -> bool:
        """Whether the entry is younger than ``ttl`` seconds."""
        now = time.time() if now is None else now
        return now - self.timestamp < ttl


def record_key(table: str, record_id: str) -> str:
    return f"{RECORD_PREFIX}{table}:{record_id}"


def query_key(table: str, fingerprint: str) -> str:
    return f"{QUERY_PREFIX}{table}:{fingerprint}"


def collect_ids(values: Iterable[Any]) -> Iterator[str]:
    """Yield every record id found in ``values``, nested links included."""
    for value in values:
        if isinstance(value, Mapping):
            record_id = value.get("id")
            if isinstance(record_id, str):
                yield record_id
            yield from collect_ids(value.values())
        elif isinstance(value, (list, tuple)):
            yield from collect_ids(value)
