"""Shared helpers for calcexpr CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn

from calcexpr.cli.console import err_console
from calcexpr.cli.context import ExitCode
from calcexpr.cli.output import format_error
from calcexpr.exceptions import CalcExprError, EvaluationError, ExpressionSyntaxError
from calcexpr.logging import get_logger

__all__ = ["cli_error_handler"]

logger = get_logger(__name__)

_UNDEFINED_PARAMETER_HINT = "Pass parameters with -p NAME=VALUE"


def _fail(text: str, code: ExitCode = ExitCode.FAILURE) -> NoReturn:
    err_console.print(text)
    raise SystemExit(code)


@contextmanager
def cli_error_handler() -> Iterator[None]:
    """Turn engine failures into an error message and an exit status.

    Syntax errors list one line per problem. An undefined parameter adds a
    hint about ``-p``. Anything that is not a CalcExprError is logged with
    its traceback before exiting.

    Example:
        >>> with cli_error_handler():
        >>>     Expression(text).evaluate()
    """
    try:
        yield
    except KeyboardInterrupt:
        _fail("\n\nInterrupted by user.", ExitCode.INTERRUPTED)
    except ExpressionSyntaxError as e:
        details = [info.describe() for info in e.errors]
        _fail(format_error("Invalid expression syntax", details=details))
    except EvaluationError as e:
        hint = _UNDEFINED_PARAMETER_HINT if "was not defined" in e.message else None
        _fail(format_error(e.message, suggestion=hint))
    except CalcExprError as e:
        _fail(format_error(e.message))
    except Exception as e:
        logger.exception("unexpected_command_error")
        _fail(format_error(str(e)))
