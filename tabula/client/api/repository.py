"""Per-table repository: CRUD entry point and query origin.

Architecture:
    ``Repository`` extends ``Query`` so every combinator is available on
    the table itself (``client.db.teams.filter(...)``). It owns no row
    data; it dispatches endpoint specs through a ``RestRunner``,
    materializes responses into records and keeps the cache in step.

    Argument-shape polymorphism of the write operations:
    - ``create(obj)`` / ``create(id, obj)`` / ``create({"id": ..., ...})``
    - ``create([...])`` (native bulk insert)
    - ``update``/``create_or_update``: id + object, id-bearing object, or list
    - ``delete``: id, id-bearing object, or list of either

    Empty lists short-circuit without any request. Every write re-reads
    the persisted record so callers see server-computed fields.

Design Decisions:
    - Bulk update/upsert/delete fan out one request per item
      concurrently; lists above BULK_WARNING_THRESHOLD log a warning
    - Cache failures are logged and treated as misses
    - A 404 on a single read is the only error turned into None

See Also:
    - Query: Combinators and pagination helpers inherited here
    - materialize: Response to record conversion
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, overload

from ..cache import CacheStore, NoCache, QueryCacheEntry, collect_ids, query_key, record_key
from ..cache.base import QUERY_PREFIX
from ..core.exceptions import ApiError, ConsistencyError, ValidationError
from ..models.metadata import RecordsMetadata
from ..models.schema import Schema
from ..query.pagination import PAGINATION_MAX_SIZE, Page
from ..query.query import Query
from ..records.materializer import materialize, materialize_many
from ..records.record import Record, to_wire, transform_object_links
from ..runtime.rest import EndpointSpec, RestRunner
from . import endpoints

logger = logging.getLogger(__name__)

BULK_WARNING_THRESHOLD = 100

_MISSING: Any = object()

SchemaProvider = Callable[[str], Awaitable[Schema | None]]
RepositoryResolver = Callable[[str], "Repository"]


class Repository(Query):
    """CRUD operations and queries for one table.

    Args:
        table: Table name
        runner: Runner executing endpoint specs over the transport
        db_branch: ``<database>:<branch>`` path segment
        cache: Cache store (defaults to a store that never caches)
        schema_provider: Async callable returning the schema for a table
        resolve: Returns the repository for another table (used for links)
    """

    def __init__(
        self,
        table: str,
        *,
        runner: RestRunner,
        db_branch: str,
        cache: CacheStore | None = None,
        schema_provider: SchemaProvider | None = None,
        resolve: RepositoryResolver | None = None,
    ) -> None:
        super().__init__(self, table)
        self._runner = runner
        self._db_branch = db_branch
        self._cache: CacheStore = cache if cache is not None else NoCache()
        self._schema_provider = schema_provider
        self._resolve = resolve or self._resolve_sibling
        self._siblings: dict[str, Repository] = {}

    def __repr__(self) -> str:
        return f"Repository(table={self._table!r}, db_branch={self._db_branch!r})"

    @property
    def cache(self) -> CacheStore:
        return self._cache

    def _resolve_sibling(self, table: str) -> Repository:
        if table == self._table:
            return self
        if table not in self._siblings:
            self._siblings[table] = Repository(
                table,
                runner=self._runner,
                db_branch=self._db_branch,
                cache=self._cache,
                schema_provider=self._schema_provider,
                resolve=self._resolve,
            )
        return self._siblings[table]

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @overload
    async def create(self, a: Mapping[str, Any]) -> Record: ...

    @overload
    async def create(self, a: str, b: Mapping[str, Any]) -> Record: ...

    @overload
    async def create(self, a: Sequence[Mapping[str, Any]]) -> list[Record]: ...

    async def create(self, a: Any, b: Any = _MISSING) -> Record | list[Record]:
        """Create one record or many.

        Raises:
            ValidationError: On an empty id or an unsupported argument shape
            ConsistencyError: If the service does not confirm every record
        """
        if _is_list(a) and b is _MISSING:
            if not a:
                return []
            return await self._bulk_insert(a)

        if isinstance(a, str) and isinstance(b, Mapping):
            _check_id(a)
            record = await self._insert_with_id(a, b)
        elif isinstance(a, Mapping) and b is _MISSING:
            if "id" in a:
                record_id = a["id"]
                if not isinstance(record_id, str):
                    raise ValidationError("Invalid arguments for create method")
                _check_id(record_id)
                record = await self._insert_with_id(record_id, _without_id(a))
            else:
                record = await self._write(endpoints.INSERT_RECORD, None, a)
        else:
            raise ValidationError("Invalid arguments for create method")

        await self._set_cache_record(record)
        return record

    async def _insert_with_id(self, record_id: str, data: Mapping[str, Any]) -> Record:
        return await self._write(endpoints.INSERT_RECORD_WITH_ID, record_id, data)

    async def _bulk_insert(self, objects: Sequence[Any]) -> list[Record]:
        for obj in objects:
            if not isinstance(obj, Mapping):
                raise ValidationError("Invalid arguments for create method")
            if "id" in obj and obj["id"] is not None:
                if not isinstance(obj["id"], str):
                    raise ValidationError("Invalid arguments for create method")
                _check_id(obj["id"])

        response = await self._runner.run(
            spec=endpoints.BULK_INSERT,
            params=self._params(),
            body={"records": [transform_object_links(obj) for obj in objects]},
        )
        record_ids = list((response or {}).get("recordIDs") or [])
        if len(record_ids) != len(objects):
            raise ConsistencyError("The server failed to save some records")

        records = await self._read_many(record_ids, cache=-1)
        if len(records) != len(objects):
            raise ConsistencyError("The server failed to save some records")

        for record in records:
            await self._set_cache_record(record)
        return records

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @overload
    async def read(self, a: str) -> Record | None: ...

    @overload
    async def read(self, a: Sequence[str]) -> list[Record]: ...

    async def read(self, a: Any) -> Record | None | list[Record]:
        """Read one record by id (None if missing) or many (missing omitted)."""
        if _is_list(a):
            if not a:
                return []
            if not all(isinstance(item, str) and item for item in a):
                raise ValidationError("Invalid arguments for read method")
            return await self._read_many(list(a))

        if not isinstance(a, str):
            raise ValidationError("Invalid arguments for read method")
        _check_id(a)

        cached = await self._get_cache_record(a)
        if cached is not None:
            return cached

        record = await self._fetch_record(a)
        if record is not None:
            await self._set_cache_record(record)
        return record

    async def _read_many(self, ids: list[str], cache: float | None = None) -> list[Record]:
        options: dict[str, Any] = {"filter": {"id": {"$any": ids}}}
        if cache is not None:
            options["cache"] = cache
        found = await self.get_all(PAGINATION_MAX_SIZE, **options)
        by_id = {record.id: record for record in found}
        return [by_id[record_id] for record_id in ids if record_id in by_id]

    async def _fetch_record(self, record_id: str) -> Record | None:
        try:
            response = await self._runner.run(
                spec=endpoints.GET_RECORD, params=self._params(id=record_id)
            )
        except ApiError as e:
            if e.status_code == 404:
                return None
            raise
        return await self._materialize(response)

    # ------------------------------------------------------------------
    # Update / upsert
    # ------------------------------------------------------------------

    async def update(self, a: Any, b: Any = _MISSING) -> Record | list[Record]:
        """Partially update one record or many.

        Accepts ``(id, changes)``, an object carrying its ``id``, or a list
        of such objects.
        """
        return await self._id_write("update", endpoints.UPDATE_RECORD, a, b)

    async def create_or_update(self, a: Any, b: Any = _MISSING) -> Record | list[Record]:
        """Insert or replace records by id."""
        return await self._id_write("create_or_update", endpoints.UPSERT_RECORD, a, b)

    async def _id_write(
        self, operation: str, spec: EndpointSpec, a: Any, b: Any
    ) -> Record | list[Record]:
        if _is_list(a) and b is _MISSING:
            if not a:
                return []
            # Every item is resolved before the first request is sent
            writes = [_resolve_write(operation, obj, _MISSING) for obj in a]
            self._warn_fan_out(operation, len(writes))
            return list(
                await asyncio.gather(
                    *(self._write_one(spec, record_id, data) for record_id, data in writes)
                )
            )

        record_id, data = _resolve_write(operation, a, b)
        return await self._write_one(spec, record_id, data)

    async def _write_one(
        self, spec: EndpointSpec, record_id: str, data: Mapping[str, Any]
    ) -> Record:
        await self._invalidate_cache(record_id)
        record = await self._write(spec, record_id, data)
        await self._set_cache_record(record)
        return record

    async def _write(
        self, spec: EndpointSpec, record_id: str | None, data: Mapping[str, Any]
    ) -> Record:
        params = self._params() if record_id is None else self._params(id=record_id)
        response = await self._runner.run(
            spec=spec, params=params, body=transform_object_links(data)
        )
        saved_id = (response or {}).get("id") or record_id
        record = await self._fetch_record(saved_id) if saved_id else None
        if record is None:
            raise ConsistencyError("The server failed to save the record")
        return record

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    @overload
    async def delete(self, a: str | Mapping[str, Any]) -> None: ...

    @overload
    async def delete(self, a: Sequence[str | Mapping[str, Any]]) -> list[str]: ...

    async def delete(self, a: Any) -> None | list[str]:
        """Delete by id, id-bearing object, or a list of either.

        A list returns the deleted ids.
        """
        if _is_list(a):
            if not a:
                return []
            self._warn_fan_out("delete", len(a))
            ids = [_identify(item, "delete") for item in a]
            await asyncio.gather(*(self._delete_one(record_id) for record_id in ids))
            return ids

        await self._delete_one(_identify(a, "delete"))
        return None

    async def _delete_one(self, record_id: str) -> None:
        await self._runner.run(spec=endpoints.DELETE_RECORD, params=self._params(id=record_id))
        await self._invalidate_cache(record_id)

    # ------------------------------------------------------------------
    # Search and query
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        *,
        fuzziness: int | None = None,
        highlight: Mapping[str, Any] | None = None,
        filter: Mapping[str, Any] | None = None,
    ) -> list[Record]:
        """Full-text search within this table. Results are never cached."""
        body: dict[str, Any] = {"query": query}
        if fuzziness is not None:
            body["fuzziness"] = fuzziness
        if highlight is not None:
            body["highlight"] = dict(highlight)
        if filter is not None:
            body["filter"] = to_wire(filter)

        response = await self._runner.run(
            spec=endpoints.SEARCH_TABLE, params=self._params(), body=body
        )
        schema = await self._get_schema()
        return materialize_many(
            (response or {}).get("records") or [],
            table=self._table,
            schema=schema,
            resolve=self._resolve,
        )

    async def query(self, query: Query) -> Page[Record]:
        """Execute ``query`` and wrap the response in a page."""
        key = query_key(self._table, query.key())
        ttl = query.options.cache
        if ttl is None:
            ttl = self._cache.default_query_ttl

        if ttl >= 0:
            entry = await self._cache_get(key)
            if isinstance(entry, QueryCacheEntry) and entry.is_fresh(ttl):
                return Page(query, entry.meta, entry.records)

        response = await self._runner.run(
            spec=endpoints.QUERY_TABLE, params=self._params(), body=query.to_payload()
        )
        response = response or {}
        meta = RecordsMetadata.model_validate(response.get("meta") or {})
        schema = await self._get_schema()
        records = materialize_many(
            response.get("records") or [],
            table=self._table,
            schema=schema,
            resolve=self._resolve,
        )
        await self._cache_set(key, QueryCacheEntry(meta=meta, records=tuple(records)))
        return Page(query, meta, records)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _params(self, **extra: Any) -> dict[str, Any]:
        return {"db_branch": self._db_branch, "table": self._table, **extra}

    async def _get_schema(self) -> Schema | None:
        if self._schema_provider is None:
            return None
        return await self._schema_provider(self._table)

    async def _materialize(self, obj: Mapping[str, Any]) -> Record:
        schema = await self._get_schema()
        return materialize(obj, table=self._table, schema=schema, resolve=self._resolve)

    def _warn_fan_out(self, operation: str, count: int) -> None:
        if count > BULK_WARNING_THRESHOLD:
            logger.warning(
                "Bulk operation fans out one request per record, this request might be slow",
                extra={"table": self._table, "operation": operation, "count": count},
            )

    async def _set_cache_record(self, record: Record) -> None:
        if not self._cache.cache_records:
            return
        await self._cache_set(record_key(self._table, record.id), record)

    async def _get_cache_record(self, record_id: str) -> Record | None:
        if not self._cache.cache_records:
            return None
        cached = await self._cache_get(record_key(self._table, record_id))
        return cached if isinstance(cached, Record) else None

    async def _invalidate_cache(self, record_id: str) -> None:
        try:
            await self._cache.delete(record_key(self._table, record_id))
            entries = await self._cache.get_all()
            for key, value in entries.items():
                if not key.startswith(QUERY_PREFIX) or not isinstance(value, QueryCacheEntry):
                    continue
                if record_id in set(collect_ids(value.records)):
                    await self._cache.delete(key)
        except Exception:
            logger.warning(
                "Cache invalidation failed",
                extra={"table": self._table, "record_id": record_id},
                exc_info=True,
            )

    async def _cache_get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except Exception:
            logger.warning("Cache read failed", extra={"key": key}, exc_info=True)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self._cache.set(key, value)
        except Exception:
            logger.warning("Cache write failed", extra={"key": key}, exc_info=True)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _check_id(record_id: str) -> None:
    if record_id == "":
        raise ValidationError("id cannot be empty")


def _without_id(data: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key != "id"}


def _identify(value: Any, operation: str) -> str:
    if isinstance(value, Record):
        return value.id
    if isinstance(value, Mapping):
        value = value.get("id")
    if not isinstance(value, str):
        raise ValidationError(f"Invalid arguments for {operation} method")
    _check_id(value)
    return value


def _resolve_write(operation: str, a: Any, b: Any) -> tuple[str, Mapping[str, Any]]:
    if isinstance(a, str) and isinstance(b, Mapping):
        record_id, data = a, b
    elif isinstance(a, Mapping) and b is _MISSING and isinstance(a.get("id"), str):
        record_id, data = a["id"], _without_id(a)
    else:
        raise ValidationError(f"Invalid arguments for {operation} method")
    _check_id(record_id)
    return record_id, data
