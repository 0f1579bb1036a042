"""Pagination options and fetched page snapshots.

Architecture:
    Two navigation styles share one options object:
    - Offset-based: ``size`` + ``offset``
    - Cursor-based: ``after``/``before``/``first``/``last`` (+ optional size/offset)

    Options are validated before any request is dispatched. A ``Page`` is an
    immutable snapshot of one fetched slice; its navigation methods always
    issue a fresh request through the originating query.

Limits:
    - PAGINATION_MAX_SIZE: largest page the service returns
    - PAGINATION_DEFAULT_SIZE: page size the service applies when none is sent
    - PAGINATION_MAX_OFFSET: largest offset the service accepts
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ..core.exceptions import PaginationError
from ..models.metadata import RecordsMetadata

if TYPE_CHECKING:
    from .query import Query

PAGINATION_MAX_SIZE = 200
PAGINATION_DEFAULT_SIZE = 20
PAGINATION_MAX_OFFSET = 800
PAGINATION_DEFAULT_OFFSET = 0

# Sentinel cursor naming the tail of the result set
END_CURSOR = "end"

R = TypeVar("R")


@dataclass(frozen=True)
class PaginationOptions:
    """Page request sent in the ``page`` field of a query payload."""

    size: int | None = None
    offset: int | None = None
    after: str | None = None
    before: str | None = None
    first: str | None = None
    last: str | None = None

    @classmethod
    def coerce(cls, value: PaginationOptions | Mapping[str, Any]) -> PaginationOptions:
        """Build options from a mapping, passing instances through."""
        if isinstance(value, PaginationOptions):
            return value
        if not isinstance(value, Mapping):
            raise PaginationError(
                f"pagination must be a mapping or PaginationOptions, got {type(value).__name__}",
                "page",
            )
        known = {f.name for f in fields(cls)}
        unknown = set(value) - known
        if unknown:
            raise PaginationError(f"unknown pagination options: {sorted(unknown)}", "page")
        return cls(**value)

    @property
    def cursors(self) -> dict[str, str]:
        return {
            name: getattr(self, name)
            for name in ("after", "before", "first", "last")
            if getattr(self, name) is not None
        }

    @property
    def has_cursor(self) -> bool:
        """Whether a server-issued cursor is part of the request."""
        return any(value != END_CURSOR for value in self.cursors.values())

    def validate(self) -> None:
        """Reject options violating size/offset limits or mixing cursors.

        Raises:
            PaginationError: Naming the violated limit
        """
        for name in ("size", "offset"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise PaginationError(
                    f"page {name} must be an integer, got {type(value).__name__}", name
                )

        if self.size is not None:
            if self.size > PAGINATION_MAX_SIZE:
                raise PaginationError(
                    f"page size exceeds max limit of {PAGINATION_MAX_SIZE}",
                    "size",
                    PAGINATION_MAX_SIZE,
                )
            if self.size < 1:
                raise PaginationError("page size must be at least 1", "size", 1)

        if self.offset is not None:
            if self.offset > PAGINATION_MAX_OFFSET:
                raise PaginationError(
                    f"page offset must not exceed {PAGINATION_MAX_OFFSET}",
                    "offset",
                    PAGINATION_MAX_OFFSET,
                )
            if self.offset < 0:
                raise PaginationError("page offset must not be negative", "offset", 0)

        cursors = self.cursors
        if ("first" in cursors or "last" in cursors) and len(cursors) > 1:
            raise PaginationError(
                "first/last cursors cannot be combined with other cursors", "cursor"
            )

    def to_payload(self) -> dict[str, Any]:
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        return {name: value for name, value in values.items() if value is not None}


@dataclass(frozen=True)
class Page(Generic[R]):
    """A fetched, immutable slice of a query's result set.

    Attributes:
        query: Query that produced this page (including its pagination)
        meta: Cursor metadata captured at fetch time
        records: Materialized records in server order
    """

    query: Query
    meta: RecordsMetadata
    records: tuple[R, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.records, tuple):
            object.__setattr__(self, "records", tuple(self.records))

    def __iter__(self) -> Iterator[R]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    @property
    def cursor(self) -> str:
        return self.meta.page.cursor

    def has_next_page(self) -> bool:
        """Snapshot of the ``more`` flag returned with this page."""
        return self.meta.page.more

    async def next_page(self, size: int | None = None, offset: int | None = None) -> Page[R]:
        """Fetch the page following this one."""
        return await self._navigate(size, offset, after=self.cursor)

    async def previous_page(self, size: int | None = None, offset: int | None = None) -> Page[R]:
        """Fetch the page preceding this one."""
        return await self._navigate(size, offset, before=self.cursor)

    async def first_page(self, size: int | None = None, offset: int | None = None) -> Page[R]:
        """Fetch the head of the whole result set."""
        return await self._navigate(size, offset, first=self.cursor)

    async def last_page(self, size: int | None = None, offset: int | None = None) -> Page[R]:
        """Fetch the tail of the whole result set."""
        return await self._navigate(size, offset, last=self.cursor)

    async def _navigate(self, size: int | None, offset: int | None, **cursor: str) -> Page[R]:
        if size is None:
            current = self.query.options.page
            size = current.size if current is not None else None
        return await self.query.get_paginated(
            page=PaginationOptions(size=size, offset=offset, **cursor)
        )

