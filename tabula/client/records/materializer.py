"""Turn flat service responses into typed, frozen records.

Per-column coercion follows the table schema:
    - datetime: parsed into ``datetime`` (failures are logged, raw value kept)
    - link: embedded objects become nested records of the target table;
      bare id references are left as they are
    - object: nested declared columns are coerced recursively, then frozen
    - multiple: lists become tuples

Link expansion stops at ``max_depth`` hops; deeper embedded objects are
kept as read-only mappings without record behavior.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.enums import ColumnType
from ..core.exceptions import ConsistencyError
from ..models.metadata import RecordMetadata
from ..models.schema import Column, Schema
from ..query.selection import MAX_LINK_DEPTH
from .record import METADATA_KEY, Record, RecordHandle

if TYPE_CHECKING:
    from ..api.repository import Repository

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)

RepositoryResolver = Callable[[str], "Repository"]


def materialize(
    obj: Mapping[str, Any],
    *,
    table: str,
    schema: Schema | None,
    resolve: RepositoryResolver,
    depth: int = 0,
    max_depth: int = MAX_LINK_DEPTH,
) -> Record:
    """Build a record for ``table`` from a response object.

    Args:
        obj: Response object (may carry the ``_meta`` property)
        table: Table the object belongs to
        schema: Branch schema used for coercion (None skips coercion)
        resolve: Returns the repository serving a table name
        depth: Link hops already followed
        max_depth: Maximum link hops to expand

    Raises:
        ConsistencyError: If the object carries no string id
    """
    data = dict(obj)
    raw_meta = data.pop(METADATA_KEY, None)
    metadata = (
        RecordMetadata.model_validate(raw_meta)
        if isinstance(raw_meta, Mapping)
        else RecordMetadata()
    )

    record_id = data.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise ConsistencyError(f"Record received for table {table!r} has no id")

    columns = _table_columns(schema, table)
    if columns is not None:
        _coerce_columns(
            data,
            columns,
            table=table,
            schema=schema,
            resolve=resolve,
            depth=depth,
            max_depth=max_depth,
        )

    handle = RecordHandle(repository=resolve(table), table=table, id=record_id)
    return Record(data, handle, metadata)


def materialize_many(
    objects: Iterable[Mapping[str, Any]],
    *,
    table: str,
    schema: Schema | None,
    resolve: RepositoryResolver,
) -> list[Record]:
    return [materialize(obj, table=table, schema=schema, resolve=resolve) for obj in objects]


def _table_columns(schema: Schema | None, table: str) -> tuple[Column, ...] | None:
    if schema is None:
        return None
    definition = schema.get_table(table)
    if definition is None:
        logger.error("Table not found in schema", extra={"table": table})
        return None
    return definition.columns


def _coerce_columns(
    data: dict[str, Any],
    columns: Iterable[Column],
    *,
    table: str,
    schema: Schema | None,
    resolve: RepositoryResolver,
    depth: int,
    max_depth: int,
) -> None:
    for column in columns:
        if column.name not in data or data[column.name] is None:
            continue
        value = data[column.name]

        if column.type == ColumnType.DATETIME:
            data[column.name] = _parse_datetime(value, table=table, column=column.name)

        elif column.type == ColumnType.LINK:
            if column.link is None:
                logger.error(
                    "Failed to parse link", extra={"table": table, "column": column.name}
                )
            elif isinstance(value, Mapping):
                data[column.name] = _expand_link(
                    value,
                    link_table=column.link.table,
                    schema=schema,
                    resolve=resolve,
                    depth=depth + 1,
                    max_depth=max_depth,
                )

        elif column.type == ColumnType.OBJECT and isinstance(value, Mapping):
            nested = dict(value)
            if column.columns:
                _coerce_columns(
                    nested,
                    column.columns,
                    table=table,
                    schema=schema,
                    resolve=resolve,
                    depth=depth,
                    max_depth=max_depth,
                )
            data[column.name] = MappingProxyType(nested)

        elif column.type == ColumnType.MULTIPLE and isinstance(value, list):
            data[column.name] = tuple(value)


def _parse_datetime(value: Any, *, table: str, column: str) -> Any:
    if isinstance(value, datetime):
        return value
    try:
        return _DATETIME.validate_python(value)
    except PydanticValidationError:
        logger.warning(
            "Failed to parse datetime",
            extra={"table": table, "column": column, "value": value},
        )
        return value


def _expand_link(
    value: Mapping[str, Any],
    *,
    link_table: str,
    schema: Schema | None,
    resolve: RepositoryResolver,
    depth: int,
    max_depth: int,
) -> Any:
    if depth > max_depth or not isinstance(value.get("id"), str):
        return MappingProxyType(dict(value))
    return materialize(
        value,
        table=link_table,
        schema=schema,
        resolve=resolve,
        depth=depth,
        max_depth=max_depth,
    )
