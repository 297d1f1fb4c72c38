"""Semantic kinds of literal values.

Every ValueExpression carries a ValueKind computed once when the node is
built. Classification walks an ordered table of (predicate, kind) pairs and
the first predicate that accepts the value wins, so the order below is part
of the contract: ``bool`` is tested before the integer family because
``True`` is also an ``int``.
"""

from __future__ import annotations

import datetime as dt
import numbers
from collections.abc import Callable
from decimal import Decimal
from enum import Enum
from typing import Any

from calcexpr.exceptions import EvaluationError

__all__ = ["ValueKind", "classify"]


class ValueKind(str, Enum):
    """Kind of a literal value."""

    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    BOOLEAN = "boolean"
    DATETIME = "datetime"


def _is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def _is_moment(value: Any) -> bool:
    return isinstance(value, (dt.datetime, dt.date))


def _is_floating(value: Any) -> bool:
    return isinstance(value, (float, Decimal))


def _is_integral(value: Any) -> bool:
    return isinstance(value, numbers.Integral)


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


_CLASSIFIERS: tuple[tuple[Callable[[Any], bool], ValueKind], ...] = (
    (_is_boolean, ValueKind.BOOLEAN),
    (_is_moment, ValueKind.DATETIME),
    (_is_floating, ValueKind.FLOAT),
    (_is_integral, ValueKind.INTEGER),
    (_is_string, ValueKind.STRING),
)


def classify(value: Any) -> ValueKind:
    """Return the semantic kind of a literal value.

    Args:
        value: A native Python literal.

    Returns:
        The first kind whose test accepts the value.

    Raises:
        EvaluationError: If the value matches none of the known shapes.

    Examples:
        >>> classify(True)
        <ValueKind.BOOLEAN: 'boolean'>
        >>> classify(3)
        <ValueKind.INTEGER: 'integer'>
    """
    for accepts, kind in _CLASSIFIERS:
        if accepts(value):
            return kind
    raise EvaluationError(
        f"Unsupported literal of type {type(value).__name__}: {value!r}"
    )
