"""Query building, filtering, sorting and pagination."""

from .filters import (
    Constraint,
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
from .pagination import (
    END_CURSOR,
    PAGINATION_DEFAULT_OFFSET,
    PAGINATION_DEFAULT_SIZE,
    PAGINATION_MAX_OFFSET,
    PAGINATION_MAX_SIZE,
    Page,
    PaginationOptions,
)
from .query import FilterLists, Query, QueryOptions
from .selection import MAX_LINK_DEPTH

__all__ = [
    "Constraint",
    "END_CURSOR",
    "FilterLists",
    "MAX_LINK_DEPTH",
    "PAGINATION_DEFAULT_OFFSET",
    "PAGINATION_DEFAULT_SIZE",
    "PAGINATION_MAX_OFFSET",
    "PAGINATION_MAX_SIZE",
    "Page",
    "PaginationOptions",
    "Query",
    "QueryOptions",
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
]
