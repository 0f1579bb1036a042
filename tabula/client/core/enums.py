"""Core enumerations shared by the query builder, schema and materializer.

Architecture:
    This module defines the closed vocabularies the client exchanges with
    the database service: column types, sort directions and filter
    operators. All are string enums so they serialize directly into wire
    payloads.

Key Types:
    - ColumnType: Column types declared in a table schema
    - SortDirection: Ascending/descending sort order
    - Operator: Filter operator vocabulary used in constraints
"""

from enum import Enum
from typing import Optional


class ColumnType(str, Enum):
    """Column types a table schema may declare."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    TEXT = "text"
    EMAIL = "email"
    MULTIPLE = "multiple"
    LINK = "link"
    OBJECT = "object"
    DATETIME = "datetime"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value


class SortDirection(str, Enum):
    """Sort order for a single column."""

    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    @classmethod
    def from_str(cls, direction: str) -> Optional["SortDirection"]:
        """Get direction from string value. Returns None if no match."""
        try:
            return cls(direction.lower())
        except (AttributeError, ValueError):
            return None


class Operator(str, Enum):
    """Filter operators understood by the service."""

    GT = "$gt"
    LT = "$lt"
    GE = "$ge"
    LE = "$le"
    EXISTS = "$exists"
    NOT_EXISTS = "$notExists"
    STARTS_WITH = "$startsWith"
    ENDS_WITH = "$endsWith"
    PATTERN = "$pattern"
    IS = "$is"
    IS_NOT = "$isNot"
    CONTAINS = "$contains"
    INCLUDES = "$includes"
    INCLUDES_SUBSTRING = "$includesSubstring"
    INCLUDES_PATTERN = "$includesPattern"
    INCLUDES_ALL = "$includesAll"

    def __str__(self) -> str:
        """String representation returns the value."""
        return self.value

    @property
    def is_comparison(self) -> bool:
        """Whether the operator only accepts ordered values."""
        return self in (Operator.GT, Operator.LT, Operator.GE, Operator.LE)
