"""Evaluation options."""

from __future__ import annotations

from enum import IntFlag

__all__ = ["EvaluateOptions"]


class EvaluateOptions(IntFlag):
    """Flags controlling how an Expression is resolved and evaluated.

    Attributes:
        NONE: Default behavior.
        IGNORE_CASE: Parameter and built-in function names match
            case-insensitively.
        NO_CACHE: Always parse the source text; never read or fill the
            compiled-expression cache.
        ITERATE_PARAMETERS: Broadcast mode. Evaluate once per position of the
            sequence-valued parameters and return the list of results.
        ROUND_AWAY_FROM_ZERO: ``Round`` resolves midpoints away from zero
            instead of to the nearest even digit.
    """

    NONE = 0
    IGNORE_CASE = 1
    NO_CACHE = 2
    ITERATE_PARAMETERS = 4
    ROUND_AWAY_FROM_ZERO = 8
