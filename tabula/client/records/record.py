"""Materialized records and their bound handles.

Architecture:
    A ``Record`` is an immutable mapping of column values plus a
    ``RecordHandle`` bound to (repository, table, id). Record behavior
    (``read``/``update``/``delete``) delegates to the handle, so a record
    stays usable on its own, independent of the page or list it came from.

    Mutations never change a record in place: ``update`` returns a new
    record read back from the service.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from ..models.metadata import RecordMetadata

if TYPE_CHECKING:
    from ..api.repository import Repository

# Internal metadata property carried by wire objects
METADATA_KEY = "_meta"


@dataclass(frozen=True)
class RecordHandle:
    """Capability to act on one stored row."""

    repository: Repository
    table: str
    id: str

    async def read(self) -> Record | None:
        return await self.repository.read(self.id)

    async def update(self, data: Mapping[str, Any]) -> Record:
        return await self.repository.update(self.id, data)

    async def delete(self) -> None:
        await self.repository.delete(self.id)


class Record(Mapping[str, Any]):
    """Immutable, schema-typed projection of one row.

    Columns are available by key (``record["name"]``) and by attribute
    (``record.name``). Attribute names of the record API (``read``,
    ``update``, ``delete``, ``get_metadata``, ``id``, ``handle`` and the
    mapping methods) take precedence over columns of the same name.
    """

    __slots__ = ("_data", "_handle", "_metadata")

    def __init__(
        self,
        data: Mapping[str, Any],
        handle: RecordHandle,
        metadata: RecordMetadata | None = None,
    ) -> None:
        object.__setattr__(self, "_data", MappingProxyType(dict(data)))
        object.__setattr__(self, "_handle", handle)
        object.__setattr__(self, "_metadata", metadata or RecordMetadata())

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __repr__(self) -> str:
        return f"Record(table={self._handle.table!r}, data={dict(self._data)!r})"

    @property
    def id(self) -> str:
        return self._handle.id

    @property
    def handle(self) -> RecordHandle:
        return self._handle

    def get_metadata(self) -> RecordMetadata:
        """Metadata captured when the record was read (version, warnings)."""
        return self._metadata

    async def read(self) -> Record | None:
        """Fetch a fresh copy of this record, or None if it no longer exists."""
        return await self._handle.read()

    async def update(self, data: Mapping[str, Any]) -> Record:
        """Partially update this record and return the persisted result.

        The current record is not modified.
        """
        return await self._handle.update(data)

    async def delete(self) -> None:
        await self._handle.delete()

    def to_dict(self) -> dict[str, Any]:
        """Plain, mutable copy of the data (nested records included)."""
        return {key: _plain(value) for key, value in self._data.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    return value


def is_identifiable(value: Any) -> bool:
    """Whether ``value`` is a record or a mapping carrying a string id."""
    if isinstance(value, Record):
        return True
    return isinstance(value, Mapping) and isinstance(value.get("id"), str)


def to_wire(value: Any) -> Any:
    """Convert a value into its JSON wire form.

    Records collapse to their id; temporal values become ISO 8601 strings.
    """
    if isinstance(value, Record):
        return value.id
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {key: to_wire(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_wire(item) for item in value]
    return value


def transform_object_links(data: Mapping[str, Any]) -> dict[str, Any]:
    """Prepare a write payload.

    Identifiable values (records or ``{"id": ...}`` mappings) collapse to
    their id and the internal metadata property is dropped.
    """
    payload: dict[str, Any] = {}
    for key, value in data.items():
        if key == METADATA_KEY:
            continue
        if is_identifiable(value):
            payload[key] = value.id if isinstance(value, Record) else value["id"]
        else:
            payload[key] = to_wire(value)
    return payload
