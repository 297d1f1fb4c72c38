"""calcexpr exception hierarchy.

All exceptions can be imported from this package:
    from calcexpr.exceptions import EvaluationError, ExpressionSyntaxError
"""

from __future__ import annotations

# Base exception
from calcexpr.exceptions.base import CalcExprError

# Configuration exceptions
from calcexpr.exceptions.config import ConfigError

# Expression exceptions
from calcexpr.exceptions.expression import (
    EvaluationError,
    ExpressionError,
    ExpressionErrorInfo,
    ExpressionSyntaxError,
    InvalidExpressionError,
)

__all__ = [
    "CalcExprError",
    "ConfigError",
    "ExpressionError",
    "InvalidExpressionError",
    "ExpressionErrorInfo",
    "ExpressionSyntaxError",
    "EvaluationError",
]
