"""Branch-wide full-text search."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..core.exceptions import ValidationError
from ..models.schema import Schema
from ..records.materializer import materialize
from ..records.record import METADATA_KEY, Record, to_wire
from ..runtime.rest import RestRunner
from . import endpoints

if TYPE_CHECKING:
    from .repository import Repository

# Table name used for results the service does not attribute to a table
ORPHAN_TABLE = "orphan"

TableTarget = str | Mapping[str, Any]


@dataclass(frozen=True)
class SearchResult:
    table: str
    record: Record


class SearchClient:
    """Search across every table of a branch.

    Example:
        >>> results = await client.search.by_table("fruit", tables=["teams"])
        >>> results["teams"][0].name
        'Team fruits'
    """

    def __init__(
        self,
        *,
        runner: RestRunner,
        db_branch: str,
        schema_provider: Callable[[str], Awaitable[Schema | None]],
        resolve: Callable[[str], Repository],
    ) -> None:
        self._runner = runner
        self._db_branch = db_branch
        self._schema_provider = schema_provider
        self._resolve = resolve

    async def all(
        self,
        query: str,
        *,
        tables: Iterable[TableTarget] | None = None,
        fuzziness: int | None = None,
    ) -> list[SearchResult]:
        """Search results in relevance order, each tagged with its table.

        Args:
            query: Full-text query
            tables: Table names or ``{"table": name, "filter": {...}}`` entries
            fuzziness: Maximum edit distance for fuzzy matching
        """
        body: dict[str, Any] = {"query": query}
        if tables is not None:
            body["tables"] = [_table_target(target) for target in tables]
        if fuzziness is not None:
            body["fuzziness"] = fuzziness

        response = await self._runner.run(
            spec=endpoints.SEARCH_BRANCH, params={"db_branch": self._db_branch}, body=body
        )

        results: list[SearchResult] = []
        for raw in (response or {}).get("records") or []:
            meta = raw.get(METADATA_KEY) or {}
            table = meta.get("table") or ORPHAN_TABLE
            schema = await self._schema_provider(table) if table != ORPHAN_TABLE else None
            record = materialize(raw, table=table, schema=schema, resolve=self._resolve)
            results.append(SearchResult(table=table, record=record))
        return results

    async def by_table(
        self,
        query: str,
        *,
        tables: Iterable[TableTarget] | None = None,
        fuzziness: int | None = None,
    ) -> dict[str, list[Record]]:
        """Search results grouped by table, relevance order kept per table."""
        grouped: dict[str, list[Record]] = {}
        for result in await self.all(query, tables=tables, fuzziness=fuzziness):
            grouped.setdefault(result.table, []).append(result.record)
        return grouped


def _table_target(target: TableTarget) -> TableTarget:
    if isinstance(target, str):
        return target
    if isinstance(target, Mapping) and isinstance(target.get("table"), str):
        return to_wire(target)
    raise ValidationError(f"Invalid search table target: {target!r}")
