"""Tabula Client - typed data access for the Tabula hosted database."""

from .api import Database, Repository, SearchClient, SearchResult, TabulaClient
from .cache import CacheStore, NoCache, QueryCacheEntry, SimpleCache
from .core import (
    ApiError,
    ClientOptions,
    ColumnType,
    ConfigurationError,
    ConsistencyError,
    PaginationError,
    RateLimitError,
    SortDirection,
    TabulaError,
    ValidationError,
)
from .models import Column, LinkTarget, RecordMetadata, RecordsMetadata, Schema, Table
from .query import (
    Page,
    PaginationOptions,
    Query,
    contains,
    ends_with,
    exists,
    ge,
    gt,
    gte,
    includes,
    includes_all,
    includes_pattern,
    includes_substring,
    is_,
    is_not,
    le,
    lt,
    lte,
    not_exists,
    pattern,
    starts_with,
)
from .records import Record, RecordHandle
from .runtime import RESTTransport, Transport

__version__ = "0.1.0"

__all__ = [
    # Client
    "TabulaClient",
    "ClientOptions",
    "Database",
    "Repository",
    "SearchClient",
    "SearchResult",
    # Query
    "Query",
    "Page",
    "PaginationOptions",
    "contains",
    "ends_with",
    "exists",
    "ge",
    "gt",
    "gte",
    "includes",
    "includes_all",
    "includes_pattern",
    "includes_substring",
    "is_",
    "is_not",
    "le",
    "lt",
    "lte",
    "not_exists",
    "pattern",
    "starts_with",
    # Records and models
    "Record",
    "RecordHandle",
    "RecordMetadata",
    "RecordsMetadata",
    "Schema",
    "Table",
    "Column",
    "LinkTarget",
    "ColumnType",
    "SortDirection",
    # Cache
    "CacheStore",
    "NoCache",
    "QueryCacheEntry",
    "SimpleCache",
    # Transport
    "RESTTransport",
    "Transport",
    # Exceptions
    "TabulaError",
    "ApiError",
    "RateLimitError",
    "ValidationError",
    "PaginationError",
    "ConsistencyError",
    "ConfigurationError",
]
