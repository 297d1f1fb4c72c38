"""Unit tests for SerializationVisitor and ParameterCollector."""

from __future__ import annotations

import datetime as dt
import math
from decimal import Decimal

import pytest

from calcexpr.domain import (
    Function,
    Identifier,
    ValueExpression,
    collect_parameters,
    serialize,
)
from calcexpr.expressions import Expression
from calcexpr.expressions.parser import parse


def _tree(text: str):
    result = parse(text)
    assert result.ok, result.errors
    return result.expression


class TestSerialize:
    """Tests for canonical source rendering."""

    @pytest.mark.parametrize(
        ("source", "expected"),
        [
            ("1+2", "1 + 2"),
            ("(a+1)*2", "(a + 1) * 2"),
            ("a + b * c", "a + (b * c)"),
            ("a and b or not c", "(a && b) || !c"),
            ("x <> 1", "x != 1"),
            ("x = 1", "x == 1"),
            ("Max(a, 2.5)", "Max(a, 2.5)"),
            ("c ? 1 : 2", "c ? 1 : 2"),
            ("-x", "-x"),
            ("~5", "~5"),
        ],
    )
    def test_canonical_form(self, source: str, expected: str) -> None:
        """Operators use their canonical spelling and nesting is explicit."""
        assert serialize(_tree(source)) == expected

    def test_strings_use_single_quotes_with_escapes(self) -> None:
        """Quotes and control characters are escaped."""
        assert serialize(ValueExpression("it's\n")) == "'it\\'s\\n'"

    def test_booleans_are_lowercase(self) -> None:
        assert serialize(ValueExpression(True)) == "true"

    def test_dates_use_hash_delimiters(self) -> None:
        """Midnight datetimes render as plain dates."""
        assert serialize(ValueExpression(dt.datetime(2024, 1, 31))) == "#2024-01-31#"
        assert (
            serialize(ValueExpression(dt.datetime(2024, 1, 31, 10, 0)))
            == "#2024-01-31T10:00:00#"
        )

    def test_unusual_identifiers_are_bracketed(self) -> None:
        assert serialize(Identifier("unit price")) == "[unit price]"
        assert serialize(Identifier("and")) == "[and]"
        assert serialize(Identifier("price")) == "price"

    @pytest.mark.parametrize(
        "source",
        ["a + b * c", "if(x > 1, 'big', 'small')", "[my var] % 3", "#2024-01-31# < d"],
    )
    def test_output_parses_to_equal_tree(self, source: str) -> None:
        """Serialized text parses back to an equal tree."""
        tree = _tree(source)
        assert _tree(serialize(tree)) == tree

    def test_overflowing_float_keeps_its_meaning(self) -> None:
        tree = _tree("1e999")
        assert serialize(tree) == "1e999"
        assert _tree(serialize(tree)) == tree

    @pytest.mark.parametrize(
        "value",
        [float("inf"), float("-inf"), float("nan"), Decimal("Infinity"), Decimal("NaN")],
    )
    def test_non_finite_values_stay_numbers(self, value: object) -> None:
        text = serialize(ValueExpression(value))
        assert collect_parameters(_tree(text)) == []

        result = Expression(text).evaluate()
        if value != value:
            assert math.isnan(result)
        else:
            assert result == float(value)


class TestCollectParameters:
    """Tests for parameter discovery."""

    def test_first_seen_order_without_duplicates(self) -> None:
        tree = _tree("b + a * b - Max(c, a)")
        assert collect_parameters(tree) == ["b", "a", "c"]

    def test_function_names_are_not_parameters(self) -> None:
        tree = Function(Identifier("Abs"), (Identifier("x"),))
        assert collect_parameters(tree) == ["x"]

    def test_literals_only(self) -> None:
        assert collect_parameters(_tree("1 + 2")) == []
