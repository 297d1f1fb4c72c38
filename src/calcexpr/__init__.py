"""calcexpr - an embeddable expression language.

Parse a formula once, then evaluate it against parameters and
caller-supplied resolvers, synchronously or from asyncio code.

    from calcexpr import Expression

    expression = Expression("Round(price * qty, 2)")
    expression.parameters = {"price": 9.99, "qty": 3}
    expression.evaluate()
"""

from __future__ import annotations

from calcexpr.domain import (
    AsyncLogicalExpressionVisitor,
    BinaryExpression,
    BinaryOperator,
    Function,
    Identifier,
    LogicalExpression,
    LogicalExpressionVisitor,
    TernaryExpression,
    UnaryExpression,
    UnaryOperator,
    ValueExpression,
    ValueKind,
)
from calcexpr.exceptions import (
    CalcExprError,
    ConfigError,
    EvaluationError,
    ExpressionError,
    ExpressionSyntaxError,
    InvalidExpressionError,
)
from calcexpr.expressions import (
    EvaluateOptions,
    Expression,
    FunctionArgs,
    HookPolicy,
    ParameterArgs,
    ResolverHook,
    is_cache_enabled,
    parse,
    set_cache_enabled,
)

__version__ = "0.1.0"

__all__: list[str] = [
    "__version__",
    "Expression",
    "EvaluateOptions",
    "ResolverHook",
    "HookPolicy",
    "ParameterArgs",
    "FunctionArgs",
    "parse",
    "set_cache_enabled",
    "is_cache_enabled",
    "ValueKind",
    "LogicalExpression",
    "ValueExpression",
    "Identifier",
    "Function",
    "UnaryOperator",
    "UnaryExpression",
    "BinaryOperator",
    "BinaryExpression",
    "TernaryExpression",
    "LogicalExpressionVisitor",
    "AsyncLogicalExpressionVisitor",
    "CalcExprError",
    "ConfigError",
    "ExpressionError",
    "ExpressionSyntaxError",
    "InvalidExpressionError",
    "EvaluationError",
]
