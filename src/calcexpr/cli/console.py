"""Rich consoles for calcexpr CLI output.

Styled in a terminal, plain text when piped. Markup, emoji codes and
highlighting are off because formulas use square brackets and colons.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

_PLAIN = {"markup": False, "emoji": False, "highlight": False, "soft_wrap": True}

console = Console(**_PLAIN)
err_console = Console(stderr=True, **_PLAIN)
