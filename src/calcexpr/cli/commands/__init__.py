"""calcexpr CLI commands."""

from __future__ import annotations

from calcexpr.cli.commands.check import check
from calcexpr.cli.commands.evaluate import evaluate

__all__ = ["check", "evaluate"]
