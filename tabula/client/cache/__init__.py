"""Record and query caching."""

from .base import (
    QUERY_PREFIX,
    RECORD_PREFIX,
    CacheStore,
    QueryCacheEntry,
    collect_ids,
    query_key,
    record_key,
)
from .simple import DEFAULT_MAX_SIZE, DEFAULT_QUERY_TTL, NoCache, SimpleCache

__all__ = [
    "CacheStore",
    "DEFAULT_MAX_SIZE",
    "DEFAULT_QUERY_TTL",
    "NoCache",
    "QUERY_PREFIX",
    "QueryCacheEntry",
    "RECORD_PREFIX",
    "SimpleCache",
    "collect_ids",
    "query_key",
    "record_key",
]
