"""Visitor interfaces for the expression AST.

Nodes never interpret themselves. Each node's ``accept`` / ``accept_async``
calls exactly one of the entry points below, and the visitor decides what a
node means: evaluation, serialization, parameter discovery and so on.
Visitors receive the full node, including its owned children, and recurse
on their own.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from calcexpr.domain.nodes import (
        BinaryExpression,
        Function,
        Identifier,
        TernaryExpression,
        UnaryExpression,
        ValueExpression,
    )

__all__ = ["LogicalExpressionVisitor", "AsyncLogicalExpressionVisitor"]

T = TypeVar("T")


class LogicalExpressionVisitor(ABC, Generic[T]):
    """Synchronous visitor: one method per node kind."""

    @abstractmethod
    def visit_value(self, node: ValueExpression) -> T: ...

    @abstractmethod
    def visit_identifier(self, node: Identifier) -> T: ...

    @abstractmethod
    def visit_function(self, node: Function) -> T: ...

    @abstractmethod
    def visit_unary(self, node: UnaryExpression) -> T: ...

    @abstractmethod
    def visit_binary(self, node: BinaryExpression) -> T: ...

    @abstractmethod
    def visit_ternary(self, node: TernaryExpression) -> T: ...


class AsyncLogicalExpressionVisitor(ABC, Generic[T]):
    """Asynchronous visitor: one coroutine method per node kind.

    Implementations must visit children in the same order as their
    synchronous counterparts; the only difference is that a visit may
    suspend (typically while awaiting a resolution hook).
    """

    @abstractmethod
    async def visit_value(self, node: ValueExpression) -> T: ...

    @abstractmethod
    async def visit_identifier(self, node: Identifier) -> T: ...

    @abstractmethod
    async def visit_function(self, node: Function) -> T: ...

    @abstractmethod
    async def visit_unary(self, node: UnaryExpression) -> T: ...

    @abstractmethod
    async def visit_binary(self, node: BinaryExpression) -> T: ...

    @abstractmethod
    async def visit_ternary(self, node: TernaryExpression) -> T: ...
