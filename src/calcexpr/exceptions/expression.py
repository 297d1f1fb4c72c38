"""Expression-specific error types for the calcexpr engine.

This module defines exceptions for expression construction, parsing and
evaluation, following the pattern from calcexpr.exceptions.base.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from calcexpr.exceptions.base import CalcExprError


class ExpressionError(CalcExprError):
    """Base exception for all expression-related errors.

    This is the parent class for all exceptions that can occur during
    expression construction, parsing or evaluation. It provides context about
    the expression that failed.

    Attributes:
        message: Human-readable error message.
        expression: The expression that caused the error (if known).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        """Initialize the ExpressionError.

        Args:
            message: Human-readable error message.
            expression: The expression that caused the error.
        """
        self.expression = expression
        super().__init__(message)


class InvalidExpressionError(ExpressionError, ValueError):
    """Exception raised when an Expression is built from unusable input.

    Raised at construction time for empty or missing source text and for a
    missing pre-built tree. It is also a ValueError so hosts that guard
    argument errors generically still catch it.
    """


@dataclass(frozen=True, slots=True)
class ExpressionErrorInfo:
    """A single syntax problem reported by the parser.

    This dataclass is immutable and uses slots for memory efficiency.

    Attributes:
        expression: The source text that failed.
        message: Human-readable error message.
        line: 1-based line of the problem.
        position: 0-based column of the problem (0 if not applicable).
    """

    expression: str
    message: str
    line: int = 1
    position: int = 0

    def describe(self) -> str:
        """Render the problem as a single line suitable for joining."""
        return f"{self.message} (line {self.line}, column {self.position + 1})"


class ExpressionSyntaxError(ExpressionError):
    """Exception raised when source text cannot be parsed.

    The parser reports every problem it finds; this exception carries all of
    them and joins their descriptions into one message.

    Attributes:
        message: Newline-joined descriptions of every problem.
        expression: The expression that failed to parse.
        errors: The individual problems, in the order they were found.
    """

    def __init__(
        self,
        errors: Sequence[ExpressionErrorInfo],
        expression: str,
    ) -> None:
        """Initialize the ExpressionSyntaxError.

        Args:
            errors: Problems reported by the parser (at least one).
            expression: The expression that failed to parse.
        """
        self.errors = tuple(errors)
        full_message = "\n".join(info.describe() for info in self.errors)
        super().__init__(full_message or "Invalid expression syntax", expression)


class EvaluationError(ExpressionError):
    """Exception raised for failures while evaluating an expression.

    Raised when an expression cannot be resolved or fails during a visit:
    a surfaced parse failure, mismatched broadcast lengths, an undefined
    parameter or function, an unsupported literal, or an operator applied to
    incompatible values.

    Attributes:
        message: Human-readable error message.
        expression: The expression that failed to evaluate (if known).
        context_vars: Names of available parameters (for debugging).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        context_vars: tuple[str, ...] = (),
    ) -> None:
        """Initialize the EvaluationError.

        Args:
            message: Human-readable error message.
            expression: The expression that failed to evaluate.
            context_vars: Names of available parameters.
        """
        self.context_vars = context_vars
        full_message = message
        if expression:
            full_message = f"{message} in expression: {expression}"
        if context_vars:
            available = ", ".join(sorted(context_vars))
            full_message = f"{full_message}\nAvailable parameters: {available}"
        super().__init__(full_message, expression=expression)
