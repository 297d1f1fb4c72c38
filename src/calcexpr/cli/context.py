"""Shared state and plumbing for calcexpr commands."""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

from calcexpr.config import CalcExprConfig

__all__ = [
    "ExitCode",
    "CLIContext",
    "async_command",
]

P = ParamSpec("P")
R = TypeVar("R")


class ExitCode(IntEnum):
    """Process exit status of the calcexpr command.

    USAGE matches the status click uses for bad arguments, and INTERRUPTED
    is the shell convention for SIGINT (128 + 2).
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """What the group callback hands to every subcommand via ``ctx.obj``.

    Attributes:
        config: Merged settings from YAML files and the environment.
        config_path: The ``--config`` argument, if given.
        verbosity: Number of ``-v`` flags.
        quiet: Whether ``-q`` was given.
    """

    config: CalcExprConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False


def async_command(f: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, R]:
    """Let click invoke a coroutine function as a plain command callback.

    Example:
        >>> @click.command()
        >>> @click.pass_context
        >>> @async_command
        >>> async def evaluate(ctx: click.Context, expression: str) -> None:
        >>>     click.echo(await Expression(expression).evaluate_async())
    """

    @functools.wraps(f)
    def run(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(f(*args, **kwargs))

    return run
