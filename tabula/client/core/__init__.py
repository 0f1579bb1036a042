"""Core configuration, enums and exceptions."""

from .config import BRANCH_ENV_VARS, DEFAULT_BRANCH, ClientOptions, resolve_branch
from .enums import ColumnType, Operator, SortDirection
from .exceptions import (
    ApiError,
    ConfigurationError,
    ConsistencyError,
    PaginationError,
    RateLimitError,
    TabulaError,
    ValidationError,
)

__all__ = [
    "ApiError",
    "BRANCH_ENV_VARS",
    "ClientOptions",
    "ColumnType",
    "ConfigurationError",
    "ConsistencyError",
    "DEFAULT_BRANCH",
    "Operator",
    "PaginationError",
    "RateLimitError",
    "SortDirection",
    "TabulaError",
    "ValidationError",
    "resolve_branch",
]
