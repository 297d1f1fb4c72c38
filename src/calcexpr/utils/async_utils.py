"""Async utilities for bridging synchronous callers to coroutines.

The evaluation engine is asynchronous end to end. Synchronous entry points
(``Expression.evaluate``, ``FunctionArgs.evaluate_arguments``) drive it to
completion through :func:`run_sync`, which never blocks a running event loop
on its own coroutine.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

import anyio

__all__ = ["run_sync"]

T = TypeVar("T")


def _run_to_completion(factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine on a fresh event loop in the current thread.

    An exception group holding exactly one exception is replaced by that
    exception so callers see the original failure type.
    """
    try:
        return anyio.run(factory)
    except BaseExceptionGroup as group:
        if len(group.exceptions) == 1:
            raise group.exceptions[0] from None
        raise


def run_sync(factory: Callable[[], Coroutine[Any, Any, T]]) -> T:
    """Run a coroutine to completion from synchronous code.

    With no event loop running in the calling thread the coroutine runs
    directly on a new loop. Otherwise it runs on a new loop inside a
    one-shot worker thread, and the calling thread waits for the result.

    Args:
        factory: Zero-argument callable returning the coroutine to run.
            A factory (rather than a coroutine object) lets the coroutine be
            created on the thread that runs it.

    Returns:
        The coroutine's return value.

    Raises:
        Whatever the coroutine raises.

    Example:
        ```python
        async def total() -> int:
            return 42

        assert run_sync(total) == 42
        ```
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_to_completion(factory)

    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="calcexpr-sync") as pool:
        return pool.submit(_run_to_completion, factory).result()
