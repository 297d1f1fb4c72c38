"""Formula parsing, caching and evaluation for calcexpr.

Syntax
------
Formulas combine literals, parameters, operators and function calls:
- Literals: 42, 3.14, 'text', true, #2024-01-31#
- Parameters: price, [unit price]
- Operators: arithmetic, comparison, logical (&&/and, ||/or, !/not),
  bitwise, and the ternary c ? a : b
- Functions: Abs, Round, Max, if(c, a, b), in(x, ...) and any name a
  function hook resolves

Examples
--------
    Expression("2 + 3 * 4").evaluate()                     # 14
    Expression("if(qty > 10, price * 0.9, price)")

Module Structure
----------------
- grammar.lark / parser.py: text to AST (parse, ParseResult)
- cache.py: process-wide compiled-expression cache
- hooks.py: ResolverHook, ParameterArgs, FunctionArgs
- builtins.py: built-in functions
- evaluator.py: EvaluationVisitor, the operator semantics
- expression.py: Expression, the orchestrator hosts use
"""

from __future__ import annotations

from calcexpr.expressions.cache import (
    CompiledExpressionCache,
    compile_expression,
    default_cache,
    is_cache_enabled,
    set_cache_enabled,
)
from calcexpr.expressions.evaluator import EvaluationVisitor
from calcexpr.expressions.expression import Expression
from calcexpr.expressions.hooks import (
    FunctionArgs,
    HookPolicy,
    ParameterArgs,
    ResolverHook,
)
from calcexpr.expressions.options import EvaluateOptions
from calcexpr.expressions.parameters import ParameterMap
from calcexpr.expressions.parser import ParseResult, parse

__all__: list[str] = [
    # Parsing
    "parse",
    "ParseResult",
    # Cache
    "CompiledExpressionCache",
    "default_cache",
    "compile_expression",
    "set_cache_enabled",
    "is_cache_enabled",
    # Hooks
    "HookPolicy",
    "ResolverHook",
    "ParameterArgs",
    "FunctionArgs",
    # Evaluation
    "EvaluateOptions",
    "ParameterMap",
    "EvaluationVisitor",
    "Expression",
]
