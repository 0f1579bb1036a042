"""Constraint constructors for filter expressions.

Each constructor returns a single-key mapping ``{operator: value}`` that
can be used as a column value in ``Query.filter``. Constraints nest freely
inside mappings for object-typed columns::

    users.filter({"address": {"zipcode": lt(150)}})
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from ..core.enums import Operator
from ..core.exceptions import ValidationError

Constraint = dict[str, Any]

COMPARABLE_TYPES = (int, float, Decimal, datetime, date)


def _constraint(operator: Operator, value: Any) -> Constraint:
    return {operator.value: value}


def _comparable(operator: Operator, value: Any) -> Constraint:
    # bool is an int subclass but has no meaningful order here
    if isinstance(value, bool) or not isinstance(value, COMPARABLE_TYPES):
        raise ValidationError(
            f"{operator.value} requires a numeric or temporal value, got {type(value).__name__}"
        )
    return _constraint(operator, value)


def gt(value: Any) -> Constraint:
    return _comparable(Operator.GT, value)


def ge(value: Any) -> Constraint:
    return _comparable(Operator.GE, value)


def lt(value: Any) -> Constraint:
    return _comparable(Operator.LT, value)


def le(value: Any) -> Constraint:
    return _comparable(Operator.LE, value)


gte = ge
lte = le


def exists(column: str) -> Constraint:
    """Match rows where ``column`` has a value."""
    return _constraint(Operator.EXISTS, column)


def not_exists(column: str) -> Constraint:
    """Match rows where ``column`` is null or missing."""
    return _constraint(Operator.NOT_EXISTS, column)


def starts_with(value: str) -> Constraint:
    return _constraint(Operator.STARTS_WITH, value)


def ends_with(value: str) -> Constraint:
    return _constraint(Operator.ENDS_WITH, value)


def pattern(value: str) -> Constraint:
    """Glob-like pattern match (``*`` and ``?`` wildcards)."""
    return _constraint(Operator.PATTERN, value)


def is_(value: Any) -> Constraint:
    return _constraint(Operator.IS, value)


def is_not(value: Any) -> Constraint:
    return _constraint(Operator.IS_NOT, value)


def contains(value: Any) -> Constraint:
    return _constraint(Operator.CONTAINS, value)


# The includes* family only applies to columns of type "multiple"
def includes(value: Any) -> Constraint:
    return _constraint(Operator.INCLUDES, value)


def includes_substring(value: str) -> Constraint:
    return _constraint(Operator.INCLUDES_SUBSTRING, value)


def includes_pattern(value: str) -> Constraint:
    return _constraint(Operator.INCLUDES_PATTERN, value)


def includes_all(value: Any) -> Constraint:
    return _constraint(Operator.INCLUDES_ALL, value)
