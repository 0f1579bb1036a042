"""Immutable query builder.

Architecture:
    A ``Query`` is a value object over one table: four filter lists
    (``$any``/``$all``/``$not``/``$none``), an ordered sort, a column
    selection, a pagination request, and a cache TTL. Every combinator
    returns a new ``Query`` whose lists are the parent's lists with the
    new terms appended; the parent is never touched.

    Execution is delegated to the owning repository, which dispatches the
    serialized payload and wraps the response in a ``Page``.

Design Decisions:
    - Filter lists are tuples so derived queries can share them safely
    - A serialized filter is None when all four lists are empty
    - A request carrying a server-issued cursor omits filter and sort;
      the cursor already encodes both
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from ..core.exceptions import PaginationError, ValidationError
from ..records.record import Record, to_wire
from .pagination import END_CURSOR, PAGINATION_MAX_SIZE, Page, PaginationOptions
from .selection import validate_columns
from .sorting import SortPairs, build_sort_filter, merge_sort, normalize_sort
from .telemetry import log_iteration_complete, log_iteration_stalled, log_page_fetched

if TYPE_CHECKING:
    from ..api.repository import Repository

_MISSING: Any = object()

FilterTerm = Mapping[str, Any]


@dataclass(frozen=True)
class FilterLists:
    """The four filter lists of a query."""

    any: tuple[FilterTerm, ...] = ()
    all: tuple[FilterTerm, ...] = ()
    not_: tuple[FilterTerm, ...] = ()
    none: tuple[FilterTerm, ...] = ()

    def is_empty(self) -> bool:
        return not (self.any or self.all or self.not_ or self.none)

    def to_payload(self) -> dict[str, list[Any]] | None:
        if self.is_empty():
            return None
        lists = {"$any": self.any, "$all": self.all, "$not": self.not_, "$none": self.none}
        return {key: [to_wire(term) for term in terms] for key, terms in lists.items() if terms}


@dataclass(frozen=True)
class QueryOptions:
    """Everything a query carries besides its table."""

    filter: FilterLists = field(default_factory=FilterLists)
    sort: SortPairs = ()
    columns: tuple[str, ...] | None = None
    page: PaginationOptions | None = None
    cache: float | None = None


class Query:
    """Filter, sort, selection and pagination intent against one table.

    Example:
        >>> teams = client.db.teams
        >>> records = await (
        ...     teams.filter("name", contains("fruits")).sort("name", "asc").get_many()
        ... )
    """

    def __init__(
        self,
        repository: Repository,
        table: str,
        options: QueryOptions | None = None,
    ) -> None:
        self._repository = repository
        self._table = table
        self._options = options or QueryOptions()

    def __repr__(self) -> str:
        return f"Query(table={self._table!r}, key={self.key()!r})"

    @property
    def table(self) -> str:
        return self._table

    @property
    def repository(self) -> Repository:
        return self._repository

    @property
    def options(self) -> QueryOptions:
        return self._options

    @property
    def filters(self) -> FilterLists:
        return self._options.filter

    def _derive(self, **changes: Any) -> Query:
        return Query(self._repository, self._table, replace(self._options, **changes))

    def _extend(self, name: str, terms: Iterable[Any]) -> Query:
        current = self._options.filter
        added = tuple(_as_term(term) for term in terms)
        lists = replace(current, **{name: getattr(current, name) + added})
        return self._derive(filter=lists)

    # ------------------------------------------------------------------
    # Combinators
    # ------------------------------------------------------------------

    def any(self, *queries: Query | FilterTerm) -> Query:
        """Match rows satisfying at least one of ``queries``."""
        return self._extend("any", queries)

    def all(self, *queries: Query | FilterTerm) -> Query:
        """Match rows satisfying every one of ``queries``."""
        return self._extend("all", queries)

    def not_(self, *queries: Query | FilterTerm) -> Query:
        """Match rows satisfying none of the combined ``queries``."""
        return self._extend("not_", queries)

    def none(self, *queries: Query | FilterTerm) -> Query:
        """Match rows satisfying none of ``queries``."""
        return self._extend("none", queries)

    def filter(self, column: str | FilterTerm, value: Any = _MISSING) -> Query:
        """Add conjunctive column terms.

        Accepts either a ``{column: value_or_constraint}`` mapping, which
        adds one term per column, or a single column and its value.

        Raises:
            ValidationError: If the arguments match neither form
        """
        if value is _MISSING:
            if not isinstance(column, Mapping) or isinstance(column, Record):
                raise ValidationError("Invalid arguments for filter method")
            terms = [{name: constraint} for name, constraint in column.items()]
        else:
            if not isinstance(column, str) or not column:
                raise ValidationError("Invalid arguments for filter method")
            terms = [{column: value}]
        return self._extend("all", terms)

    def sort(self, column: str, direction: Any = "asc") -> Query:
        """Sort by ``column``; re-sorting a column keeps its position."""
        if not isinstance(column, str) or not column:
            raise ValidationError("Invalid arguments for sort method")
        return self._derive(sort=merge_sort(self._options.sort, column, direction))

    def select(self, columns: str | Iterable[str]) -> Query:
        """Restrict the returned columns (dotted paths follow links)."""
        return self._derive(columns=validate_columns(columns))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_payload(self) -> dict[str, Any]:
        """Request body for the table query endpoint."""
        page = self._options.page
        payload: dict[str, Any] = {}
        if page is None or not page.has_cursor:
            filter_payload = self._options.filter.to_payload()
            if filter_payload is not None:
                payload["filter"] = filter_payload
            if self._options.sort:
                payload["sort"] = build_sort_filter(self._options.sort)
        if page is not None:
            page_payload = page.to_payload()
            if page_payload:
                payload["page"] = page_payload
        payload["columns"] = list(self._options.columns or ("*",))
        return payload

    def key(self) -> str:
        """Stable fingerprint of this query, used as a cache key."""
        page = self._options.page
        fingerprint = {
            "filter": self._options.filter.to_payload(),
            "sort": build_sort_filter(self._options.sort),
            "page": page.to_payload() if page is not None else None,
            "columns": list(self._options.columns or ("*",)),
        }
        return json.dumps(fingerprint, sort_keys=True, default=str)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _apply_options(
        self,
        *,
        page: PaginationOptions | Mapping[str, Any] | None = None,
        filter: FilterTerm | None = None,
        sort: Any = None,
        columns: str | Iterable[str] | None = None,
        cache: float | None = None,
    ) -> Query:
        page_options = PaginationOptions.coerce(page) if page is not None else None
        if page_options is not None:
            page_options.validate()
        effective_page = page_options if page_options is not None else self._options.page
        if sort is not None and effective_page is not None and effective_page.has_cursor:
            raise PaginationError("cursor pagination cannot be combined with sort", "cursor")

        query = self
        if filter is not None:
            query = query.filter(filter)
        if sort is not None:
            query = query._derive(sort=normalize_sort(sort))
        if columns is not None:
            query = query.select(columns)
        if page_options is not None:
            query = query._derive(page=page_options)
        if cache is not None:
            query = query._derive(cache=cache)
        return query

    async def get_paginated(self, **options: Any) -> Page[Record]:
        """Fetch one page.

        Keyword Args:
            page: ``PaginationOptions`` or mapping (size, offset, after, before, first, last)
            filter: Extra ``{column: constraint}`` terms
            sort: Sort replacing the query's sort
            columns: Column selection
            cache: Query cache TTL in seconds (negative bypasses the cache)

        Raises:
            PaginationError: On size/offset limits or cursor combined with sort
        """
        query = self._apply_options(**options)
        return await self._repository.query(query)

    async def get_many(self, **options: Any) -> list[Record]:
        page = await self.get_paginated(**options)
        return list(page.records)

    async def get_one(self, **options: Any) -> Record | None:
        """First matching record, or None when nothing matches."""
        options["page"] = PaginationOptions(size=1)
        page = await self.get_paginated(**options)
        return page.records[0] if page.records else None

    async def get_all(self, batch_size: int = PAGINATION_MAX_SIZE, **options: Any) -> list[Record]:
        """Every matching record, paging until the result set is exhausted."""
        records: list[Record] = []
        async for batch in self.get_iterator(batch_size, **options):
            records.extend(batch)
        return records

    async def get_iterator(
        self, batch_size: int = PAGINATION_MAX_SIZE, **options: Any
    ) -> AsyncIterator[list[Record]]:
        """Yield batches of records page by page.

        Pages are requested strictly in order; each request uses the
        cursor of the page before it.
        """
        options["page"] = PaginationOptions(size=batch_size)
        page = await self.get_paginated(**options)
        page_index = 0
        total = 0
        while True:
            log_page_fetched(
                table=self._table,
                page_index=page_index,
                records=len(page),
                more=page.has_next_page(),
            )
            total += len(page)
            yield list(page.records)

            if not page.has_next_page():
                break
            if not page.records:
                log_iteration_stalled(table=self._table, page_index=page_index, cursor=page.cursor)
                break
            page_index += 1
            page = await page.next_page()

        log_iteration_complete(table=self._table, pages=page_index + 1, total_records=total)

    def __aiter__(self) -> AsyncIterator[Record]:
        return self._iterate_records()

    async def _iterate_records(self) -> AsyncIterator[Record]:
        async for batch in self.get_iterator():
            for record in batch:
                yield record

    async def first_page(self, size: int | None = None) -> Page[Record]:
        """Head of the result set."""
        return await self.get_paginated(page=PaginationOptions(size=size, offset=0))

    async def last_page(self, size: int | None = None) -> Page[Record]:
        """Tail of the result set."""
        return await self.get_paginated(page=PaginationOptions(size=size, before=END_CURSOR))


def _as_term(term: Any) -> FilterTerm:
    if isinstance(term, Query):
        return term.filters.to_payload() or {}
    if isinstance(term, Mapping) and not isinstance(term, Record):
        return dict(term)
    raise ValidationError(f"Invalid filter term: {term!r}")
