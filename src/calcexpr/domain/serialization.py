"""Synchronous visitors over the AST.

- SerializationVisitor renders a tree back to canonical source text.
- ParameterCollector lists the parameter names a tree references.
"""

from __future__ import annotations

import datetime as dt
import math
import re
from decimal import Decimal

from calcexpr.domain.kinds import ValueKind
from calcexpr.domain.nodes import (
    BinaryExpression,
    Function,
    Identifier,
    LogicalExpression,
    TernaryExpression,
    UnaryExpression,
    ValueExpression,
)
from calcexpr.domain.visitors import LogicalExpressionVisitor

__all__ = [
    "SerializationVisitor",
    "ParameterCollector",
    "serialize",
    "collect_parameters",
]

_PLAIN_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_KEYWORDS = frozenset({"and", "or", "not", "true", "false"})

# 1e999 overflows to infinity when parsed
_INFINITY = "1e999"

_STRING_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _is_finite(value: float | Decimal) -> bool:
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def _non_finite(value: float | Decimal) -> str:
    """Spell infinities and NaN with literals the parser reads back."""
    if (isinstance(value, Decimal) and value.is_nan()) or value != value:
        return f"({_INFINITY} - {_INFINITY})"
    if value < 0:
        return f"(-{_INFINITY})"
    return _INFINITY


class SerializationVisitor(LogicalExpressionVisitor[str]):
    """Render an AST as source text the parser accepts.

    Nested binary and ternary operands are always parenthesized, so the
    output never depends on operator precedence.

    Example:
        >>> tree = parse("(a+1)*2").expression
        >>> tree.accept(SerializationVisitor())
        '(a + 1) * 2'
    """

    def visit_value(self, node: ValueExpression) -> str:
        if node.kind == ValueKind.STRING:
            escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in node.value)
            return f"'{escaped}'"
        if node.kind == ValueKind.BOOLEAN:
            return "true" if node.value else "false"
        if node.kind == ValueKind.DATETIME:
            value = node.value
            if isinstance(value, dt.datetime) and value.time() == dt.time():
                value = value.date()
            return f"#{value.isoformat()}#"
        if node.kind == ValueKind.FLOAT and not _is_finite(node.value):
            return _non_finite(node.value)
        if isinstance(node.value, float):
            return repr(node.value)
        return str(node.value)

    def visit_identifier(self, node: Identifier) -> str:
        if _PLAIN_NAME.fullmatch(node.name) and node.name not in _KEYWORDS:
            return node.name
        return f"[{node.name}]"

    def visit_function(self, node: Function) -> str:
        arguments = ", ".join(arg.accept(self) for arg in node.arguments)
        return f"{node.name}({arguments})"

    def visit_unary(self, node: UnaryExpression) -> str:
        return f"{node.operator.value}{self._operand(node.expression)}"

    def visit_binary(self, node: BinaryExpression) -> str:
        left = self._operand(node.left)
        right = self._operand(node.right)
        return f"{left} {node.operator.value} {right}"

    def visit_ternary(self, node: TernaryExpression) -> str:
        condition = self._operand(node.condition)
        left = self._operand(node.left)
        right = self._operand(node.right)
        return f"{condition} ? {left} : {right}"

    def _operand(self, node: LogicalExpression) -> str:
        text = node.accept(self)
        if isinstance(node, (BinaryExpression, TernaryExpression)):
            return f"({text})"
        return text


class ParameterCollector(LogicalExpressionVisitor[None]):
    """Collect distinct parameter names in first-seen (left-to-right) order.

    Function names are not parameters and are skipped; their arguments
    are visited.
    """

    def __init__(self) -> None:
        self.names: list[str] = []
        self._seen: set[str] = set()

    def visit_value(self, node: ValueExpression) -> None:
        return None

    def visit_identifier(self, node: Identifier) -> None:
        if node.name not in self._seen:
            self._seen.add(node.name)
            self.names.append(node.name)

    def visit_function(self, node: Function) -> None:
        for argument in node.arguments:
            argument.accept(self)

    def visit_unary(self, node: UnaryExpression) -> None:
        node.expression.accept(self)

    def visit_binary(self, node: BinaryExpression) -> None:
        node.left.accept(self)
        node.right.accept(self)

    def visit_ternary(self, node: TernaryExpression) -> None:
        node.condition.accept(self)
        node.left.accept(self)
        node.right.accept(self)


def serialize(expression: LogicalExpression) -> str:
    """Return canonical source text for a tree."""
    return expression.accept(SerializationVisitor())


def collect_parameters(expression: LogicalExpression) -> list[str]:
    """Return the distinct parameter names a tree references."""
    collector = ParameterCollector()
    expression.accept(collector)
    return collector.names
