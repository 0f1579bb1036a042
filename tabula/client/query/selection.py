"""Column selection validation."""

from __future__ import annotations

from collections.abc import Iterable

from ..core.exceptions import ValidationError

# Deepest chain of link hops a selection or materialization will follow
MAX_LINK_DEPTH = 5


def link_depth(column: str) -> int:
    """Number of link hops in a dotted column path (``owner.team.name`` -> 2)."""
    return column.count(".")


def validate_columns(columns: Iterable[str]) -> tuple[str, ...]:
    """Validate a column selection.

    Raises:
        ValidationError: If a column is empty or nests deeper than MAX_LINK_DEPTH
    """
    if isinstance(columns, str):
        columns = [columns]

    selected = tuple(columns)
    if not selected:
        raise ValidationError("At least one column must be selected")

    for column in selected:
        if not isinstance(column, str) or not column:
            raise ValidationError(f"Invalid column selection: {column!r}")
        if link_depth(column) > MAX_LINK_DEPTH:
            raise ValidationError(
                f"Column {column!r} exceeds the maximum link depth of {MAX_LINK_DEPTH}"
            )
    return selected
