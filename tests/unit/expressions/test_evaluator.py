"""Unit tests for EvaluationVisitor and the built-in functions."""

from __future__ import annotations

import datetime as dt
import math
from decimal import Decimal
from typing import Any

import pytest

from calcexpr.exceptions import EvaluationError
from calcexpr.expressions.builtins import BUILTINS, lookup
from calcexpr.expressions.evaluator import EvaluationVisitor
from calcexpr.expressions.options import EvaluateOptions
from calcexpr.expressions.parser import parse


async def _evaluate(
    text: str,
    parameters: dict[str, Any] | None = None,
    options: EvaluateOptions = EvaluateOptions.NONE,
) -> Any:
    result = parse(text)
    assert result.ok, result.errors
    visitor = EvaluationVisitor(parameters or {}, options)
    return await result.expression.accept_async(visitor)


class TestArithmetic:
    """Tests for arithmetic operators."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1 + 2 * 3", 7),
            ("(1 + 2) * 3", 9),
            ("10 - 4 - 3", 3),
            ("7 / 2", 3.5),
            ("7 % 3", 1),
            ("-2 * 3", -6),
            ("2.5 * 2", 5.0),
            ("1 << 4", 16),
            ("256 >> 2", 64),
            ("6 & 3", 2),
            ("6 | 3", 7),
            ("6 ^ 3", 5),
            ("~0", -1),
        ],
    )
    async def test_operators(self, text: str, expected: Any) -> None:
        assert await _evaluate(text) == expected

    @pytest.mark.asyncio
    async def test_string_concatenation(self) -> None:
        assert await _evaluate("'total: ' + 3") == "total: 3"
        assert await _evaluate("1 + 'a'") == "1a"

    @pytest.mark.asyncio
    async def test_decimal_and_float_mix(self) -> None:
        result = await _evaluate("a + 0.5", {"a": Decimal("1.5")})
        assert result == 2.0

    @pytest.mark.asyncio
    async def test_date_comparison(self) -> None:
        assert await _evaluate("d < #2024-02-01#", {"d": dt.datetime(2024, 1, 31)})

    @pytest.mark.asyncio
    async def test_division_by_zero_is_evaluation_error(self) -> None:
        with pytest.raises(EvaluationError, match="Cannot apply '/'"):
            await _evaluate("1 / 0")

    @pytest.mark.asyncio
    async def test_incompatible_operands_are_evaluation_error(self) -> None:
        with pytest.raises(EvaluationError):
            await _evaluate("'a' * 'b'")
        with pytest.raises(EvaluationError):
            await _evaluate("'a' < 1")


class TestLogic:
    """Tests for comparison, logical and ternary operators."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1 == 1", True),
            ("1 = 2", False),
            ("1 != 2", True),
            ("1 <> 1", False),
            ("2 >= 2", True),
            ("true and false", False),
            ("true or false", True),
            ("not true", False),
            ("!false", True),
            ("1 < 2 ? 'yes' : 'no'", "yes"),
        ],
    )
    async def test_operators(self, text: str, expected: Any) -> None:
        assert await _evaluate(text) == expected

    @pytest.mark.asyncio
    async def test_and_short_circuits(self) -> None:
        """The right operand of a false && is never evaluated."""
        assert await _evaluate("false && missing") is False

    @pytest.mark.asyncio
    async def test_or_short_circuits(self) -> None:
        assert await _evaluate("true || missing") is True

    @pytest.mark.asyncio
    async def test_ternary_evaluates_one_branch(self) -> None:
        assert await _evaluate("x > 0 ? x : missing", {"x": 5}) == 5


class TestIdentifiers:
    """Tests for parameter resolution in the visitor."""

    @pytest.mark.asyncio
    async def test_parameter_value(self) -> None:
        assert await _evaluate("price * qty", {"price": 2.5, "qty": 4}) == 10.0

    @pytest.mark.asyncio
    async def test_undefined_parameter(self) -> None:
        with pytest.raises(EvaluationError, match="Parameter 'qty' was not defined") as exc_info:
            await _evaluate("price * qty", {"price": 1})
        assert "Available parameters: price" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_parameter_holding_a_tree_is_evaluated(self) -> None:
        nested = parse("a * 2").expression
        assert await _evaluate("b + 1", {"b": nested, "a": 5}) == 11


class TestBuiltins:
    """Tests for built-in functions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Abs(-3)", 3),
            ("Ceiling(1.2)", 2),
            ("Floor(1.8)", 1),
            ("Exp(0)", 1.0),
            ("Log(1, 2)", 0.0),
            ("Log10(1000)", 3.0),
            ("Pow(2, 10)", 1024.0),
            ("Sign(-4.2)", -1),
            ("Sign(0)", 0),
            ("Sqrt(16)", 4.0),
            ("Truncate(-2.7)", -2),
            ("Max(1, 7, 3)", 7),
            ("Min(4, 2)", 2),
            ("Sin(0)", 0.0),
            ("Cos(0)", 1.0),
            ("Tan(0)", 0.0),
            ("Asin(0)", 0.0),
            ("Acos(1)", 0.0),
            ("Atan(0)", 0.0),
            ("in(2, 1, 2, 3)", True),
            ("in('x', 'a', 'b')", False),
            ("if(1 > 2, 'a', 'b')", "b"),
        ],
    )
    async def test_builtin_values(self, text: str, expected: Any) -> None:
        assert await _evaluate(text) == expected

    @pytest.mark.asyncio
    async def test_log_natural(self) -> None:
        assert await _evaluate("Log(x)", {"x": math.e}) == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_if_is_lazy(self) -> None:
        assert await _evaluate("if(true, 1, missing)") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("Round(2.5)", 2), ("Round(3.5)", 4), ("Round(2.675, 2)", 2.67), ("Round(-2.5)", -2)],
    )
    async def test_round_is_bankers_by_default(self, text: str, expected: float) -> None:
        assert await _evaluate(text) == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("Round(2.5)", 3.0), ("Round(-2.5)", -3.0), ("Round(2.675, 2)", 2.68), ("Round(7)", 7)],
    )
    async def test_round_away_from_zero(self, text: str, expected: float) -> None:
        result = await _evaluate(text, options=EvaluateOptions.ROUND_AWAY_FROM_ZERO)
        assert result == expected

    @pytest.mark.asyncio
    async def test_names_are_case_sensitive_by_default(self) -> None:
        with pytest.raises(EvaluationError, match="Function 'abs' not found"):
            await _evaluate("abs(-1)")

    @pytest.mark.asyncio
    async def test_ignore_case_matches_builtins(self) -> None:
        assert await _evaluate("aBS(-1)", options=EvaluateOptions.IGNORE_CASE) == 1

    @pytest.mark.asyncio
    async def test_unknown_function(self) -> None:
        with pytest.raises(EvaluationError, match="Function 'Nope' not found"):
            await _evaluate("Nope(1)")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["Abs()", "Abs(1, 2)", "if(true, 1)", "Pow(2)"])
    async def test_wrong_arity(self, text: str) -> None:
        with pytest.raises(EvaluationError, match="expects"):
            await _evaluate(text)

    @pytest.mark.asyncio
    async def test_domain_error_is_evaluation_error(self) -> None:
        with pytest.raises(EvaluationError, match="Function 'Sqrt' failed"):
            await _evaluate("Sqrt(-1)")

    def test_lookup(self) -> None:
        assert lookup("Max") is BUILTINS["Max"]
        assert lookup("MAX") is None
        assert lookup("MAX", ignore_case=True) is BUILTINS["Max"]
