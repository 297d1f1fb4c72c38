"""Built-in functions available to every expression.

Names are matched exactly as registered (``Abs``, ``Max``, ``if`` ...) unless
the expression uses EvaluateOptions.IGNORE_CASE. A function hook always gets
the first chance to answer a call, so hosts can override any built-in.

Most built-ins receive their arguments already evaluated. ``if`` is lazy: it
receives the argument subtrees and evaluates only the branch it needs.
"""

from __future__ import annotations

import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from calcexpr.exceptions import EvaluationError
from calcexpr.expressions.options import EvaluateOptions

if TYPE_CHECKING:
    from calcexpr.domain.nodes import LogicalExpression

__all__ = ["Builtin", "BUILTINS", "lookup"]

Evaluate = Callable[["LogicalExpression"], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class Builtin:
    """A registered built-in function.

    Attributes:
        name: Canonical spelling.
        min_args: Fewest arguments accepted.
        max_args: Most arguments accepted (None for no limit).
        call: ``call(values, options)`` for eager built-ins, or
            ``await call(arguments, evaluate)`` for lazy ones.
        lazy: Whether ``call`` receives unevaluated subtrees.
    """

    name: str
    min_args: int
    max_args: int | None
    call: Callable[..., Any]
    lazy: bool = False

    def check_arity(self, count: int) -> None:
        if count >= self.min_args and (self.max_args is None or count <= self.max_args):
            return
        if self.max_args is None:
            expected = f"at least {self.min_args}"
        elif self.min_args == self.max_args:
            expected = str(self.min_args)
        else:
            expected = f"{self.min_args} to {self.max_args}"
        raise EvaluationError(
            f"Function '{self.name}' expects {expected} argument(s), got {count}"
        )


def _unary(func: Callable[[Any], Any]) -> Callable[[Sequence[Any], EvaluateOptions], Any]:
    def call(values: Sequence[Any], options: EvaluateOptions) -> Any:
        return func(values[0])

    return call


def _log(values: Sequence[Any], options: EvaluateOptions) -> float:
    if len(values) == 2:
        return math.log(values[0], values[1])
    return math.log(values[0])


def _pow(values: Sequence[Any], options: EvaluateOptions) -> float:
    return math.pow(values[0], values[1])


def _round(values: Sequence[Any], options: EvaluateOptions) -> Any:
    value = values[0]
    digits = int(values[1]) if len(values) == 2 else 0
    if not options & EvaluateOptions.ROUND_AWAY_FROM_ZERO:
        return round(value, digits)

    rounded = Decimal(str(value)).quantize(
        Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP
    )
    if isinstance(value, Decimal):
        return rounded
    if isinstance(value, int):
        return int(rounded)
    return float(rounded)


def _sign(value: Any) -> int:
    return (value > 0) - (value < 0)


def _max(values: Sequence[Any], options: EvaluateOptions) -> Any:
    return max(values)


def _min(values: Sequence[Any], options: EvaluateOptions) -> Any:
    return min(values)


def _in(values: Sequence[Any], options: EvaluateOptions) -> bool:
    return values[0] in values[1:]


async def _if(arguments: Sequence[LogicalExpression], evaluate: Evaluate) -> Any:
    condition = await evaluate(arguments[0])
    return await evaluate(arguments[1] if condition else arguments[2])


BUILTINS: dict[str, Builtin] = {
    builtin.name: builtin
    for builtin in (
        Builtin("Abs", 1, 1, _unary(abs)),
        Builtin("Ceiling", 1, 1, _unary(math.ceil)),
        Builtin("Floor", 1, 1, _unary(math.floor)),
        Builtin("Exp", 1, 1, _unary(math.exp)),
        Builtin("Log", 1, 2, _log),
        Builtin("Log10", 1, 1, _unary(math.log10)),
        Builtin("Pow", 2, 2, _pow),
        Builtin("Round", 1, 2, _round),
        Builtin("Sign", 1, 1, _unary(_sign)),
        Builtin("Sqrt", 1, 1, _unary(math.sqrt)),
        Builtin("Truncate", 1, 1, _unary(math.trunc)),
        Builtin("Max", 1, None, _max),
        Builtin("Min", 1, None, _min),
        Builtin("Sin", 1, 1, _unary(math.sin)),
        Builtin("Cos", 1, 1, _unary(math.cos)),
        Builtin("Tan", 1, 1, _unary(math.tan)),
        Builtin("Asin", 1, 1, _unary(math.asin)),
        Builtin("Acos", 1, 1, _unary(math.acos)),
        Builtin("Atan", 1, 1, _unary(math.atan)),
        Builtin("in", 2, None, _in),
        Builtin("if", 3, 3, _if, lazy=True),
    )
}

_FOLDED: dict[str, Builtin] = {name.casefold(): b for name, b in BUILTINS.items()}


def lookup(name: str, *, ignore_case: bool = False) -> Builtin | None:
    """Find a built-in by name.

    Examples:
        >>> lookup("Abs").name
        'Abs'
        >>> lookup("abs") is None
        True
        >>> lookup("abs", ignore_case=True).name
        'Abs'
    """
    if ignore_case:
        return _FOLDED.get(name.casefold())
    return BUILTINS.get(name)
