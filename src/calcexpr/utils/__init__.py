"""Utility modules for calcexpr.

- async_utils.py: run coroutines from synchronous code (run_sync)
"""

from __future__ import annotations

from calcexpr.utils.async_utils import run_sync

__all__: list[str] = ["run_sync"]
