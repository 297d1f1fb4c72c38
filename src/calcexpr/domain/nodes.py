"""AST node model.

The parser builds these nodes once; afterwards they are read-only. A node
holds no evaluation logic: ``accept`` and ``accept_async`` hand the node to
the matching visitor entry point and return whatever the visitor returns.

Nodes support weak references so the compiled-expression cache can hold a
tree without keeping it alive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from calcexpr.domain.kinds import ValueKind, classify

if TYPE_CHECKING:
    from calcexpr.domain.visitors import (
        AsyncLogicalExpressionVisitor,
        LogicalExpressionVisitor,
    )

__all__ = [
    "LogicalExpression",
    "ValueExpression",
    "Identifier",
    "Function",
    "UnaryOperator",
    "UnaryExpression",
    "BinaryOperator",
    "BinaryExpression",
    "TernaryExpression",
]

T = TypeVar("T")


class UnaryOperator(str, Enum):
    """Prefix operators. Values are the canonical source spelling."""

    NOT = "!"
    NEGATE = "-"
    BITWISE_NOT = "~"


class BinaryOperator(str, Enum):
    """Infix operators. Values are the canonical source spelling."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    MODULO = "%"
    EQUAL = "=="
    NOT_EQUAL = "!="
    LESSER = "<"
    LESSER_OR_EQUAL = "<="
    GREATER = ">"
    GREATER_OR_EQUAL = ">="
    AND = "&&"
    OR = "||"
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"
    LEFT_SHIFT = "<<"
    RIGHT_SHIFT = ">>"


class LogicalExpression(ABC):
    """Base class of every AST node."""

    __slots__ = ("__weakref__",)

    @abstractmethod
    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        """Dispatch to the synchronous visitor entry point for this node."""

    @abstractmethod
    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        """Dispatch to the asynchronous visitor entry point for this node."""

    def __str__(self) -> str:
        from calcexpr.domain.serialization import serialize

        return serialize(self)


@dataclass(frozen=True, slots=True)
class ValueExpression(LogicalExpression):
    """Literal value.

    Attributes:
        value: The native literal.
        kind: Semantic kind. Classified from ``value`` when omitted.

    Examples:
        >>> ValueExpression(2.5).kind
        <ValueKind.FLOAT: 'float'>
    """

    value: Any
    kind: ValueKind = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.kind is None:
            object.__setattr__(self, "kind", classify(self.value))

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_value(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_value(self)


@dataclass(frozen=True, slots=True)
class Identifier(LogicalExpression):
    """Reference to a parameter, resolved at evaluation time."""

    name: str

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_identifier(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_identifier(self)


@dataclass(frozen=True, slots=True)
class Function(LogicalExpression):
    """Function call: a callee identifier and its ordered argument subtrees."""

    identifier: Identifier
    arguments: tuple[LogicalExpression, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.arguments, tuple):
            object.__setattr__(self, "arguments", tuple(self.arguments))

    @property
    def name(self) -> str:
        return self.identifier.name

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_function(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_function(self)


@dataclass(frozen=True, slots=True)
class UnaryExpression(LogicalExpression):
    operator: UnaryOperator
    expression: LogicalExpression

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_unary(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_unary(self)


@dataclass(frozen=True, slots=True)
class BinaryExpression(LogicalExpression):
    operator: BinaryOperator
    left: LogicalExpression
    right: LogicalExpression

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_binary(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_binary(self)


@dataclass(frozen=True, slots=True)
class TernaryExpression(LogicalExpression):
    """Conditional: ``condition ? left : right``."""

    condition: LogicalExpression
    left: LogicalExpression
    right: LogicalExpression

    def accept(self, visitor: LogicalExpressionVisitor[T]) -> T:
        return visitor.visit_ternary(self)

    async def accept_async(self, visitor: AsyncLogicalExpressionVisitor[T]) -> T:
        return await visitor.visit_ternary(self)
