"""Command-line interface for calcexpr."""

from __future__ import annotations

from calcexpr.cli.context import CLIContext, ExitCode, async_command
from calcexpr.cli.output import format_error, format_json, format_value

__all__ = [
    "CLIContext",
    "ExitCode",
    "async_command",
    "format_error",
    "format_json",
    "format_value",
]
