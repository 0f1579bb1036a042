"""Public API: client facade, repositories and search."""

from .client import Database, TabulaClient
from .repository import BULK_WARNING_THRESHOLD, Repository
from .search import ORPHAN_TABLE, SearchClient, SearchResult

__all__ = [
    "BULK_WARNING_THRESHOLD",
    "Database",
    "ORPHAN_TABLE",
    "Repository",
    "SearchClient",
    "SearchResult",
    "TabulaClient",
]
