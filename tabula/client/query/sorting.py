"""Sort order normalization.

A sort may be given as a column name, a ``{"column": ..., "direction": ...}``
mapping, a ``{column: direction}`` mapping, or a list mixing those. All
forms normalize to ordered ``(column, SortDirection)`` pairs; a column
given twice keeps its first position and its last direction.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..core.enums import SortDirection
from ..core.exceptions import ValidationError

SortPairs = tuple[tuple[str, SortDirection], ...]


def to_direction(direction: Any) -> SortDirection:
    if isinstance(direction, SortDirection):
        return direction
    resolved = SortDirection.from_str(direction) if isinstance(direction, str) else None
    if resolved is None:
        raise ValidationError(f"Invalid sort direction: {direction!r}")
    return resolved


def merge_sort(pairs: SortPairs, column: str, direction: Any) -> SortPairs:
    """Set ``column``'s direction, keeping the position of existing columns."""
    resolved = to_direction(direction)
    merged = dict(pairs)
    merged[column] = resolved
    return tuple(merged.items())


def normalize_sort(spec: Any) -> SortPairs:
    """Normalize any accepted sort form into ordered pairs."""
    pairs: SortPairs = ()
    for column, direction in _iter_sort(spec):
        pairs = merge_sort(pairs, column, direction)
    return pairs


def _iter_sort(spec: Any):
    if isinstance(spec, str):
        if not spec:
            raise ValidationError("Sort column cannot be empty")
        yield spec, SortDirection.ASC
    elif isinstance(spec, Mapping):
        if "column" in spec:
            yield spec["column"], spec.get("direction") or SortDirection.ASC
        else:
            yield from spec.items()
    elif isinstance(spec, (list, tuple)):
        for item in spec:
            yield from _iter_sort(item)
    else:
        raise ValidationError(f"Invalid sort specification: {spec!r}")


def build_sort_filter(pairs: SortPairs) -> list[dict[str, str]]:
    """Wire form: a list of single-column ``{column: direction}`` mappings."""
    return [{column: direction.value} for column, direction in pairs]
