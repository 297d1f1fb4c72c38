"""Expression: the public entry point for evaluating formulas.

An Expression owns either source text or a pre-built AST. It resolves the
text to an AST on first use, through the process-wide cache unless
EvaluateOptions.NO_CACHE is set, and evaluates it against its parameter map
and resolution hooks.

Evaluation is asynchronous underneath. ``evaluate()`` is the synchronous
façade, and ``evaluate_async()`` is the native entry point.

Example:
    ```python
    expression = Expression("Round(price * qty, 2)")
    expression.parameters = {"price": 9.99, "qty": 3}
    expression.evaluate()  # 29.97
    ```
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from calcexpr.domain.nodes import LogicalExpression
from calcexpr.domain.serialization import collect_parameters
from calcexpr.exceptions import (
    EvaluationError,
    ExpressionSyntaxError,
    InvalidExpressionError,
)
from calcexpr.expressions.cache import default_cache
from calcexpr.expressions.evaluator import EvaluationVisitor
from calcexpr.expressions.hooks import FunctionArgs, ParameterArgs, ResolverHook
from calcexpr.expressions.options import EvaluateOptions
from calcexpr.expressions.parameters import ParameterMap
from calcexpr.logging import get_logger
from calcexpr.utils.async_utils import run_sync

__all__ = ["Expression"]

logger = get_logger(__name__)

ParameterHandler = Callable[[str, ParameterArgs], None]
FunctionHandler = Callable[[str, FunctionArgs], None]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(
        value, (str, bytes, bytearray, Mapping)
    )


def _with_handlers(
    handlers: list[Callable[[str, Any], None]],
    hook: ResolverHook[Any] | None,
) -> ResolverHook[Any] | None:
    """Combine sync handlers (run first, in order) with an async hook."""
    if not handlers:
        return hook

    registered = list(handlers)

    def dispatch(name: str, args: Any) -> None:
        for handler in registered:
            handler(name, args)

    return ResolverHook(sync=dispatch, async_=hook)


class Expression:
    """A formula bound to parameters, options and resolution hooks.

    Args:
        expression: Source text or a pre-built AST.
        options: Evaluation flags.
        parameter_hook: Resolves parameters missing from ``parameters``.
            A plain callable, a coroutine function or a ResolverHook.
        function_hook: Resolves function calls before the built-ins are
            consulted. Same accepted shapes as ``parameter_hook``.

    Attributes:
        parameter_handlers: Synchronous parameter handlers used by
            ``evaluate()``. They run in registration order, before the
            instance-level hook.
        function_handlers: Synchronous function handlers used by
            ``evaluate()``, with the same ordering.
        error: Message of the resolution failure, once one is recorded.

    Raises:
        InvalidExpressionError: If the input is empty, None or neither text
            nor an AST.
    """

    def __init__(
        self,
        expression: str | LogicalExpression,
        options: EvaluateOptions = EvaluateOptions.NONE,
        parameter_hook: Any = None,
        function_hook: Any = None,
    ) -> None:
        if isinstance(expression, LogicalExpression):
            self._text: str | None = None
            self._parsed: LogicalExpression | None = expression
        elif isinstance(expression, str):
            if not expression.strip():
                raise InvalidExpressionError("Expression cannot be empty")
            self._text = expression
            self._parsed = None
        elif expression is None:
            raise InvalidExpressionError("Expression cannot be None")
        else:
            raise InvalidExpressionError(
                f"Expression must be text or a LogicalExpression, "
                f"got {type(expression).__name__}"
            )

        self._options = EvaluateOptions(options)
        self._parameters = ParameterMap(ignore_case=self._ignore_case)
        self.parameter_hook: ResolverHook[ParameterArgs] | None = ResolverHook.coerce(
            parameter_hook
        )
        self.function_hook: ResolverHook[FunctionArgs] | None = ResolverHook.coerce(
            function_hook
        )
        self.parameter_handlers: list[ParameterHandler] = []
        self.function_handlers: list[FunctionHandler] = []
        self.error: str | None = None

    @property
    def _ignore_case(self) -> bool:
        return bool(self._options & EvaluateOptions.IGNORE_CASE)

    @property
    def options(self) -> EvaluateOptions:
        return self._options

    @property
    def parameters(self) -> ParameterMap:
        return self._parameters

    @parameters.setter
    def parameters(self, values: Mapping[str, Any]) -> None:
        self._parameters = ParameterMap(values, ignore_case=self._ignore_case)

    @property
    def parsed_expression(self) -> LogicalExpression | None:
        """The resolved AST, or None when the source does not parse."""
        self.has_errors()
        return self._parsed

    @staticmethod
    def compile(text: str, nocache: bool = False) -> LogicalExpression:
        """Compile text through the process-wide cache.

        Raises:
            ExpressionSyntaxError: If the text does not parse.
        """
        return default_cache.compile(text, nocache)

    def has_errors(self) -> bool:
        """Resolve the AST if needed and report whether that failed.

        Any exception raised while resolving counts as a failure, including
        a RecursionError from a deeply nested formula. The first failure is
        recorded in ``error`` and reported again on later calls without
        reparsing.
        """
        if self.error is not None:
            return True
        if self._parsed is not None:
            return False

        assert self._text is not None
        nocache = bool(self._options & EvaluateOptions.NO_CACHE)
        try:
            self._parsed = self.compile(self._text, nocache)
        except ExpressionSyntaxError as e:
            self.error = e.message
            return True
        except Exception as e:
            logger.debug(
                "expression_resolution_failed",
                expression=self._text,
                error=repr(e),
            )
            self.error = str(e) or type(e).__name__
            return True
        return False

    def parameter_names(self) -> list[str]:
        """Distinct parameter names referenced by the formula, in order.

        Raises:
            EvaluationError: If the formula does not parse.
        """
        if self.has_errors():
            raise EvaluationError(self.error or "Invalid expression")
        assert self._parsed is not None
        return collect_parameters(self._parsed)

    def evaluate(self) -> Any:
        """Evaluate synchronously.

        The instance's ``parameter_handlers`` / ``function_handlers`` run
        first for every lookup, followed by the instance-level hooks.

        Returns:
            The result, or a list of results in broadcast mode.

        Raises:
            EvaluationError: If the formula does not parse or cannot be
                evaluated.
        """
        parameter_hook = _with_handlers(self.parameter_handlers, self.parameter_hook)
        function_hook = _with_handlers(self.function_handlers, self.function_hook)
        return run_sync(lambda: self.evaluate_async(parameter_hook, function_hook))

    async def evaluate_async(
        self,
        parameter_hook: Any = None,
        function_hook: Any = None,
    ) -> Any:
        """Evaluate asynchronously.

        Args:
            parameter_hook: Replaces the instance-level parameter hook for
                this call only.
            function_hook: Replaces the instance-level function hook for
                this call only.

        Returns:
            The result, or a list of results in broadcast mode.

        Raises:
            EvaluationError: If the formula does not parse or cannot be
                evaluated.
        """
        if self.has_errors():
            raise EvaluationError(self.error or "Invalid expression")
        assert self._parsed is not None

        visitor = EvaluationVisitor(
            self._parameters,
            self._options,
            ResolverHook.coerce(parameter_hook) or self.parameter_hook,
            ResolverHook.coerce(function_hook) or self.function_hook,
        )

        if self._options & EvaluateOptions.ITERATE_PARAMETERS:
            return await self._evaluate_broadcast(self._parsed, visitor)
        return await self._parsed.accept_async(visitor)

    async def _evaluate_broadcast(
        self,
        root: LogicalExpression,
        visitor: EvaluationVisitor,
    ) -> list[Any]:
        sequences = {
            name: list(value)
            for name, value in self._parameters.items()
            if _is_sequence(value)
        }
        if not sequences:
            return []

        # One-shot iterators are consumed above; keep the materialized values
        for name, values in sequences.items():
            if isinstance(self._parameters[name], Iterator):
                self._parameters[name] = values

        lengths = {name: len(values) for name, values in sequences.items()}
        size = next(iter(lengths.values()))
        if any(length != size for length in lengths.values()):
            detail = ", ".join(f"{name}={length}" for name, length in lengths.items())
            raise EvaluationError(
                f"Sequence parameters must all have the same length ({detail})"
            )

        snapshot = dict(self._parameters.items())

        logger.debug(
            "broadcast_started",
            expression=str(self),
            size=size,
            sequence_parameters=list(sequences),
        )

        cursors = {name: iter(values) for name, values in sequences.items()}
        results: list[Any] = []
        try:
            for _ in range(size):
                for name, cursor in cursors.items():
                    self._parameters[name] = next(cursor)
                results.append(await root.accept_async(visitor))
        finally:
            self._parameters.clear()
            self._parameters.update(snapshot)
        return results

    def __str__(self) -> str:
        if self.has_errors():
            return self._text or ""
        return str(self._parsed)

    def __repr__(self) -> str:
        source = self._text if self._text is not None else str(self._parsed)
        return f"Expression({source!r}, options={self._options!r})"
