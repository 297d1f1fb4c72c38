"""AST domain model for calcexpr.

- kinds.py: ValueKind and literal classification
- nodes.py: immutable AST node types
- visitors.py: sync and async visitor interfaces
- serialization.py: sync visitors (source rendering, parameter discovery)
"""

from __future__ import annotations

from calcexpr.domain.kinds import ValueKind, classify
from calcexpr.domain.nodes import (
    BinaryExpression,
    BinaryOperator,
    Function,
    Identifier,
    LogicalExpression,
    TernaryExpression,
    UnaryExpression,
    UnaryOperator,
    ValueExpression,
)
from calcexpr.domain.serialization import (
    ParameterCollector,
    SerializationVisitor,
    collect_parameters,
    serialize,
)
from calcexpr.domain.visitors import (
    AsyncLogicalExpressionVisitor,
    LogicalExpressionVisitor,
)

__all__: list[str] = [
    "ValueKind",
    "classify",
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
    "SerializationVisitor",
    "ParameterCollector",
    "serialize",
    "collect_parameters",
]
