"""Expression evaluator for calcexpr.

This module provides EvaluationVisitor, the asynchronous visitor that gives
AST nodes their meaning:

- Literals evaluate to their value.
- Parameters come from the parameter map, then from the parameter hook.
- Function calls go to the function hook, then to the built-ins.
- ``&&`` / ``||`` short-circuit and the ternary evaluates one branch.
- ``+`` concatenates when either operand is a string.

Operator and built-in failures raised by Python (TypeError, ValueError,
ArithmeticError) surface as EvaluationError. Failures raised by hooks
propagate unchanged.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

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
from calcexpr.domain.visitors import AsyncLogicalExpressionVisitor
from calcexpr.exceptions import EvaluationError
from calcexpr.expressions.builtins import lookup
from calcexpr.expressions.hooks import FunctionArgs, ParameterArgs, ResolverHook
from calcexpr.expressions.options import EvaluateOptions

__all__ = ["EvaluationVisitor"]

_OPERATOR_ERRORS = (TypeError, ValueError, ArithmeticError)


def _harmonize(left: Any, right: Any) -> tuple[Any, Any]:
    """Bring a Decimal/float operand pair to a common type."""
    if isinstance(left, Decimal) and isinstance(right, float):
        return float(left), right
    if isinstance(left, float) and isinstance(right, Decimal):
        return left, float(right)
    return left, right


def _add(left: Any, right: Any) -> Any:
    if isinstance(left, str) or isinstance(right, str):
        return f"{left}{right}"
    return left + right


_UNARY: dict[UnaryOperator, Callable[[Any], Any]] = {
    UnaryOperator.NOT: operator.not_,
    UnaryOperator.NEGATE: operator.neg,
    UnaryOperator.BITWISE_NOT: operator.invert,
}

_BINARY: dict[BinaryOperator, Callable[[Any, Any], Any]] = {
    BinaryOperator.ADD: _add,
    BinaryOperator.SUBTRACT: operator.sub,
    BinaryOperator.MULTIPLY: operator.mul,
    BinaryOperator.DIVIDE: operator.truediv,
    BinaryOperator.MODULO: operator.mod,
    BinaryOperator.EQUAL: operator.eq,
    BinaryOperator.NOT_EQUAL: operator.ne,
    BinaryOperator.LESSER: operator.lt,
    BinaryOperator.LESSER_OR_EQUAL: operator.le,
    BinaryOperator.GREATER: operator.gt,
    BinaryOperator.GREATER_OR_EQUAL: operator.ge,
    BinaryOperator.BITWISE_AND: operator.and_,
    BinaryOperator.BITWISE_OR: operator.or_,
    BinaryOperator.BITWISE_XOR: operator.xor,
    BinaryOperator.LEFT_SHIFT: operator.lshift,
    BinaryOperator.RIGHT_SHIFT: operator.rshift,
}


class EvaluationVisitor(AsyncLogicalExpressionVisitor[Any]):
    """Evaluates an AST against parameters, hooks and built-ins.

    The visitor reads the parameter map at every identifier visit, so a
    caller may change the map between passes (as broadcast evaluation does)
    and reuse the same visitor.

    Attributes:
        parameters: Parameter map consulted before the parameter hook.
        options: Evaluation flags.

    Example:
        ```python
        visitor = EvaluationVisitor({"a": 2})
        tree = compile_expression("a * 3")
        assert await tree.accept_async(visitor) == 6
        ```
    """

    def __init__(
        self,
        parameters: Mapping[str, Any] | None = None,
        options: EvaluateOptions = EvaluateOptions.NONE,
        parameter_hook: ResolverHook[ParameterArgs] | None = None,
        function_hook: ResolverHook[FunctionArgs] | None = None,
    ) -> None:
        self.parameters: Mapping[str, Any] = parameters if parameters is not None else {}
        self.options = options
        self._parameter_hook = parameter_hook
        self._function_hook = function_hook

    async def evaluate(self, node: LogicalExpression) -> Any:
        return await node.accept_async(self)

    async def visit_value(self, node: ValueExpression) -> Any:
        return node.value

    async def visit_identifier(self, node: Identifier) -> Any:
        name = node.name
        if name in self.parameters:
            value = self.parameters[name]
            if isinstance(value, LogicalExpression):
                return await value.accept_async(self)

            from calcexpr.expressions.expression import Expression

            if isinstance(value, Expression):
                return await value.evaluate_async(
                    self._parameter_hook, self._function_hook
                )
            return value

        if self._parameter_hook is not None:
            args = ParameterArgs()
            await self._parameter_hook(name, args)
            if args.has_result:
                return args.result

        raise EvaluationError(
            f"Parameter '{name}' was not defined",
            context_vars=tuple(self.parameters),
        )

    async def visit_function(self, node: Function) -> Any:
        name = node.name
        if self._function_hook is not None:
            args = FunctionArgs(name, node.arguments, self.evaluate)
            await self._function_hook(name, args)
            if args.has_result:
                return args.result

        builtin = lookup(name, ignore_case=bool(self.options & EvaluateOptions.IGNORE_CASE))
        if builtin is None:
            raise EvaluationError(f"Function '{name}' not found")
        builtin.check_arity(len(node.arguments))

        if builtin.lazy:
            return await builtin.call(node.arguments, self.evaluate)

        values = [await argument.accept_async(self) for argument in node.arguments]
        try:
            return builtin.call(values, self.options)
        except _OPERATOR_ERRORS as e:
            raise EvaluationError(f"Function '{name}' failed: {e}") from e

    async def visit_unary(self, node: UnaryExpression) -> Any:
        operand = await node.expression.accept_async(self)
        try:
            return _UNARY[node.operator](operand)
        except _OPERATOR_ERRORS as e:
            raise EvaluationError(
                f"Cannot apply '{node.operator.value}' to {operand!r}: {e}"
            ) from e

    async def visit_binary(self, node: BinaryExpression) -> Any:
        left = await node.left.accept_async(self)

        if node.operator is BinaryOperator.AND:
            if not left:
                return False
            return bool(await node.right.accept_async(self))
        if node.operator is BinaryOperator.OR:
            if left:
                return True
            return bool(await node.right.accept_async(self))

        right = await node.right.accept_async(self)
        left, right = _harmonize(left, right)
        try:
            return _BINARY[node.operator](left, right)
        except _OPERATOR_ERRORS as e:
            raise EvaluationError(
                f"Cannot apply '{node.operator.value}' to {left!r} and {right!r}: {e}"
            ) from e

    async def visit_ternary(self, node: TernaryExpression) -> Any:
        condition = await node.condition.accept_async(self)
        branch = node.left if condition else node.right
        return await branch.accept_async(self)
