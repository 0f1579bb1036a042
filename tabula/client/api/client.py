"""Client facade for one database branch.

Architecture:
    ``TabulaClient`` wires the collaborators together: a transport (REST
    over aiohttp unless injected), a ``RestRunner``, a cache store and the
    branch schema. Repositories are created lazily per table and memoized
    in a ``Database`` registry; link materialization resolves target
    tables through the same registry.

Design Decisions:
    - Transport injection allows testing with fake transports
    - The schema is injected (generated upstream) or fetched once; a table
      missing from it triggers a single re-fetch
    - Context manager pattern closes the transport the client created

See Also:
    - Repository: Per-table CRUD and query entry point
    - SearchClient: Branch-wide search
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..cache import CacheStore, SimpleCache
from ..core.config import ClientOptions
from ..core.exceptions import TabulaError
from ..models.schema import Schema
from ..runtime.rest import RESTTransport, RestRunner, Transport
from . import endpoints
from .repository import Repository
from .search import SearchClient

logger = logging.getLogger(__name__)


class Database:
    """Registry of table repositories (``db.teams`` or ``db["teams"]``)."""

    def __init__(self, client: TabulaClient) -> None:
        self._client = client
        self._repositories: dict[str, Repository] = {}

    def __getitem__(self, table: str) -> Repository:
        if not isinstance(table, str) or not table:
            raise KeyError(table)
        if table not in self._repositories:
            self._repositories[table] = Repository(
                table,
                runner=self._client.runner,
                db_branch=self._client.options.db_branch,
                cache=self._client.cache,
                schema_provider=self._client.get_schema,
                resolve=self.__getitem__,
            )
        return self._repositories[table]

    def __getattr__(self, table: str) -> Repository:
        if table.startswith("_"):
            raise AttributeError(table)
        return self[table]

    def __contains__(self, table: object) -> bool:
        return table in self._repositories


class TabulaClient:
    """Typed data-access client for one database branch.

    Example:
        >>> async with TabulaClient(ClientOptions.from_env()) as client:
        ...     team = await client.db.teams.create({"name": "Team fruits"})
        ...     page = await client.db.teams.sort("name").get_paginated(page={"size": 10})
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        transport: Transport | None = None,
        cache: CacheStore | None = None,
        schema: Schema | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            options: Connection settings (read from the environment if omitted)
            transport: Transport to use instead of REST over aiohttp
            cache: Cache store (defaults to an in-memory LRU)
            schema: Branch schema; fetched from the service when omitted
        """
        self._options = options or ClientOptions.from_env()
        self._owns_transport = transport is None
        self._transport: Transport = transport or RESTTransport.from_options(self._options)
        self._runner = RestRunner(self._transport)
        self._cache: CacheStore = cache if cache is not None else SimpleCache()
        self._schema = schema
        self._schema_lock = asyncio.Lock()
        self._refetched_tables: set[str] = set()
        self._db = Database(self)
        self._search = SearchClient(
            runner=self._runner,
            db_branch=self._options.db_branch,
            schema_provider=self.get_schema,
            resolve=self._db.__getitem__,
        )
        self._closed = False

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def runner(self) -> RestRunner:
        return self._runner

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def db(self) -> Database:
        return self._db

    @property
    def search(self) -> SearchClient:
        return self._search

    async def get_schema(self, table: str | None = None) -> Schema | None:
        """Branch schema, fetched on first use.

        When ``table`` is given and missing from the known schema, the
        schema is re-fetched once for that table.
        """
        async with self._schema_lock:
            if self._schema is None:
                self._schema = await self._fetch_schema()
            elif (
                table is not None
                and self._schema.get_table(table) is None
                and table not in self._refetched_tables
            ):
                self._refetched_tables.add(table)
                logger.debug("Table missing from schema, refreshing", extra={"table": table})
                try:
                    self._schema = await self._fetch_schema()
                except TabulaError:
                    logger.warning(
                        "Schema refresh failed", extra={"table": table}, exc_info=True
                    )
            return self._schema

    async def _fetch_schema(self) -> Schema:
        response: Any = await self._runner.run(
            spec=endpoints.GET_BRANCH_DETAILS,
            params={"db_branch": self._options.db_branch},
        )
        return Schema.model_validate((response or {}).get("schema") or {})

    async def close(self) -> None:
        """Close the client and the transport it created."""
        if self._closed:
            return
        self._closed = True
        logger.debug("Closing TabulaClient")
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> TabulaClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
