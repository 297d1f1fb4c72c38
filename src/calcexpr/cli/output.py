"""Output formatting utilities for the calcexpr CLI."""

from __future__ import annotations

import datetime as dt
import json
from collections.abc import Sequence
from decimal import Decimal
from typing import Any

__all__ = [
    "format_error",
    "format_json",
    "format_value",
]


def format_error(
    message: str,
    details: Sequence[str] | None = None,
    suggestion: str | None = None,
) -> str:
    """Render an error for stderr: a headline, indented details, a hint.

    Example:
        >>> print(format_error(
        ...     "Parameter 'qty' was not defined",
        ...     suggestion="Pass it with -p qty=VALUE",
        ... ))
        Error: Parameter 'qty' was not defined
        Suggestion: Pass it with -p qty=VALUE
    """
    lines = [f"Error: {message}", *(f"  {detail}" for detail in details or ())]
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def _json_default(value: Any) -> Any:
    if isinstance(value, (dt.date, dt.datetime, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Dates become ISO-8601 strings and Decimals keep their exact digits as
    strings.

    Raises:
        TypeError: If data contains a value with no JSON form.
    """
    return json.dumps(data, indent=2, default=_json_default)


def format_value(value: Any) -> str:
    """Render an evaluation result the way formulas spell literals.

    Examples:
        >>> format_value(True)
        'true'
        >>> format_value([1, 2.5])
        '[1, 2.5]'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return str(value)
