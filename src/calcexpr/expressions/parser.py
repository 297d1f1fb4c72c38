"""Formula parser.

This module turns formula text into the AST defined in calcexpr.domain.
It uses a Lark LALR parser over a formal grammar (grammar.lark) and a
Transformer that builds immutable nodes bottom-up.

Syntax summary:
- Literals: 42, 3.14, 1e-3, 'text', "text", true, false, #2024-01-31#
- Parameters: price, [unit price]
- Calls: Max(a, b), if(cond, a, b)
- Operators (lowest to highest precedence):
  ?:  ||/or  &&/and  |  ^  &  ==/=/!=/<>  < <= > >=  << >>  + -  * / %
  and the prefix operators ! not - ~

Parsing never raises for bad input: every problem becomes an
ExpressionErrorInfo in the returned ParseResult.
"""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from lark import Lark, Token, Transformer
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from calcexpr.domain.kinds import ValueKind
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
from calcexpr.exceptions import ExpressionErrorInfo
from calcexpr.logging import get_logger

__all__ = ["ParseResult", "parse"]

logger = get_logger(__name__)

# Load grammar from file
_GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"
_GRAMMAR = _GRAMMAR_PATH.read_text(encoding="utf-8")

_parser = Lark(
    _GRAMMAR,
    parser="lalr",
    start="start",
)

# Parsing stops resuming after this many problems
_MAX_ERRORS = 10

_ESCAPE_PATTERN = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of parsing formula text.

    Attributes:
        expression: Root of the AST, or None when any error was found.
        errors: Every problem found, in source order.
    """

    expression: LogicalExpression | None
    errors: tuple[ExpressionErrorInfo, ...] = ()

    @property
    def ok(self) -> bool:
        return self.expression is not None and not self.errors


def _unescape(body: str) -> str:
    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if len(escape) == 5 and escape[0] == "u":
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE_PATTERN.sub(replace, body)


def _binary(operator: BinaryOperator) -> Callable[..., BinaryExpression]:
    def build(self: _AstBuilder, items: list[LogicalExpression]) -> BinaryExpression:
        return BinaryExpression(operator, items[0], items[1])

    return build


def _unary(operator: UnaryOperator) -> Callable[..., UnaryExpression]:
    def build(self: _AstBuilder, items: list[LogicalExpression]) -> UnaryExpression:
        return UnaryExpression(operator, items[-1])

    return build


class _AstBuilder(Transformer[Token, LogicalExpression]):
    """Transform the Lark parse tree into calcexpr nodes.

    Problems that only show up while building nodes (such as an impossible
    calendar date) are recorded in ``errors`` instead of raised, and a
    placeholder node keeps the transformation going.
    """

    def __init__(self, source: str) -> None:
        super().__init__()
        self._source = source
        self.errors: list[ExpressionErrorInfo] = []

    def ternary(self, items: list[LogicalExpression]) -> TernaryExpression:
        """Grammar: logical_or "?" expression ":" expression -> ternary"""
        return TernaryExpression(items[0], items[1], items[2])

    or_ = _binary(BinaryOperator.OR)
    and_ = _binary(BinaryOperator.AND)
    bit_or = _binary(BinaryOperator.BITWISE_OR)
    bit_xor = _binary(BinaryOperator.BITWISE_XOR)
    bit_and = _binary(BinaryOperator.BITWISE_AND)
    eq = _binary(BinaryOperator.EQUAL)
    ne = _binary(BinaryOperator.NOT_EQUAL)
    lt = _binary(BinaryOperator.LESSER)
    le = _binary(BinaryOperator.LESSER_OR_EQUAL)
    gt = _binary(BinaryOperator.GREATER)
    ge = _binary(BinaryOperator.GREATER_OR_EQUAL)
    lshift = _binary(BinaryOperator.LEFT_SHIFT)
    rshift = _binary(BinaryOperator.RIGHT_SHIFT)
    add = _binary(BinaryOperator.ADD)
    sub = _binary(BinaryOperator.SUBTRACT)
    mul = _binary(BinaryOperator.MULTIPLY)
    div = _binary(BinaryOperator.DIVIDE)
    mod = _binary(BinaryOperator.MODULO)

    not_ = _unary(UnaryOperator.NOT)
    neg = _unary(UnaryOperator.NEGATE)
    bit_not = _unary(UnaryOperator.BITWISE_NOT)

    def function_call(self, items: list[object]) -> Function:
        """Grammar: function_call: NAME "(" _arguments? ")"

        items[0] is the callee name, items[1:] are the argument subtrees.
        """
        name = str(items[0])
        arguments = tuple(item for item in items[1:] if item is not None)
        return Function(Identifier(name), arguments)  # type: ignore[arg-type]

    def identifier(self, items: list[Token]) -> Identifier:
        token = items[0]
        if token.type == "BRACKET_NAME":
            return Identifier(str(token)[1:-1])
        return Identifier(str(token))

    def integer(self, items: list[Token]) -> ValueExpression:
        return ValueExpression(int(items[0]), ValueKind.INTEGER)

    def float(self, items: list[Token]) -> ValueExpression:
        return ValueExpression(float(items[0]), ValueKind.FLOAT)

    def string(self, items: list[Token]) -> ValueExpression:
        return ValueExpression(_unescape(str(items[0])[1:-1]), ValueKind.STRING)

    def date(self, items: list[Token]) -> ValueExpression:
        token = items[0]
        text = str(token)[1:-1].strip()
        try:
            moment = dt.datetime.fromisoformat(text)
        except ValueError:
            self.errors.append(
                ExpressionErrorInfo(
                    expression=self._source,
                    message=f"Invalid date literal '{text}'",
                    line=token.line or 1,
                    position=(token.column or 1) - 1,
                )
            )
            return ValueExpression(text, ValueKind.STRING)
        return ValueExpression(moment, ValueKind.DATETIME)

    def true(self, items: list[Token]) -> ValueExpression:
        return ValueExpression(True, ValueKind.BOOLEAN)

    def false(self, items: list[Token]) -> ValueExpression:
        return ValueExpression(False, ValueKind.BOOLEAN)


def _describe(error: UnexpectedInput, source: str) -> ExpressionErrorInfo:
    """Map a Lark error to an ExpressionErrorInfo with a readable message."""
    line = error.line if isinstance(error.line, int) and error.line > 0 else 1
    position = error.column - 1 if isinstance(error.column, int) and error.column > 0 else 0

    if isinstance(error, UnexpectedCharacters):
        message = f"Invalid character '{error.char}'"
    elif isinstance(error, UnexpectedEOF) or (
        isinstance(error, UnexpectedToken) and error.token.type == "$END"
    ):
        message = "Unexpected end of expression"
        position = len(source.splitlines()[-1]) if source.strip() else 0
    elif isinstance(error, UnexpectedToken):
        message = f"Unexpected token '{error.token}'"
    else:
        message = str(error) or "Invalid expression syntax"

    return ExpressionErrorInfo(
        expression=source,
        message=message,
        line=line,
        position=position,
    )


def parse(source: str) -> ParseResult:
    """Parse formula text into an AST.

    The parser resumes after recoverable problems so a single call can
    report several of them.

    Args:
        source: Formula text.

    Returns:
        ParseResult with the AST root, or with the problems found.

    Examples:
        >>> parse("1 + 2").ok
        True
        >>> parse("1 + ").errors[0].message
        'Unexpected end of expression'
    """
    errors: list[ExpressionErrorInfo] = []
    attempts = 0

    def add(info: ExpressionErrorInfo) -> None:
        if not errors or errors[-1] != info:
            errors.append(info)

    def record(error: UnexpectedInput) -> bool:
        nonlocal attempts
        attempts += 1
        add(_describe(error, source))
        return attempts < _MAX_ERRORS

    if not source or source.isspace():
        errors.append(
            ExpressionErrorInfo(expression=source, message="Empty expression")
        )
        return ParseResult(expression=None, errors=tuple(errors))

    tree = None
    try:
        tree = _parser.parse(source, on_error=record)
    except UnexpectedInput as e:
        add(_describe(e, source))

    expression: LogicalExpression | None = None
    if tree is not None and not errors:
        builder = _AstBuilder(source)
        try:
            expression = builder.transform(tree)
        except VisitError as e:
            errors.append(
                ExpressionErrorInfo(expression=source, message=str(e.orig_exc))
            )
        errors.extend(builder.errors)

    if errors:
        logger.debug(
            "expression_parse_failed",
            expression=source,
            error_count=len(errors),
        )
        return ParseResult(expression=None, errors=tuple(errors))

    return ParseResult(expression=expression)
