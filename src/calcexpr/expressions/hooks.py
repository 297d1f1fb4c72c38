"""Caller-supplied resolution hooks.

When evaluation meets a parameter that is not in the parameter map, or a
function call, it hands the name and an argument object to a hook. The hook
reports its answer by setting ``args.result``; its return value is ignored.

A ResolverHook combines a synchronous callable and an asynchronous one.
When both are present they always both run: the sync part first, then the
awaited async part.

Example:
    ```python
    def lookup_rate(name: str, args: ParameterArgs) -> None:
        if name == "rate":
            args.result = 0.2

    async def fetch(name: str, args: ParameterArgs) -> None:
        if not args.has_result:
            args.result = await store.get(name)

    hook = ResolverHook(sync=lookup_rate, async_=fetch)
    hook.policy  # HookPolicy.BOTH_SEQUENTIAL
    ```
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from calcexpr.utils.async_utils import run_sync

if TYPE_CHECKING:
    from calcexpr.domain.nodes import LogicalExpression

__all__ = [
    "HookPolicy",
    "ParameterArgs",
    "FunctionArgs",
    "ResolverHook",
]

A = TypeVar("A", bound="_ResolutionArgs")


class HookPolicy(str, Enum):
    """Which channels a ResolverHook dispatches to."""

    SYNC_ONLY = "sync_only"
    ASYNC = "async"
    BOTH_SEQUENTIAL = "both_sequential"


class _ResolutionArgs:
    """Result slot shared by parameter and function hook arguments."""

    def __init__(self) -> None:
        self._result: Any = None
        self.has_result = False

    @property
    def result(self) -> Any:
        return self._result

    @result.setter
    def result(self, value: Any) -> None:
        self._result = value
        self.has_result = True


class ParameterArgs(_ResolutionArgs):
    """Argument object passed to parameter hooks.

    Attributes:
        result: Value for the parameter. Setting it marks has_result.
        has_result: True once a hook has supplied a value.
    """


class FunctionArgs(_ResolutionArgs):
    """Argument object passed to function hooks.

    The arguments are handed over unevaluated; the hook decides whether and
    when to evaluate them.

    Attributes:
        name: Function name as written in the source.
        arguments: Unevaluated argument subtrees, in call order.
        result: Value of the call. Setting it marks has_result.
        has_result: True once a hook has supplied a value.
    """

    def __init__(
        self,
        name: str,
        arguments: Sequence[LogicalExpression],
        evaluate: Callable[[LogicalExpression], Awaitable[Any]],
    ) -> None:
        super().__init__()
        self.name = name
        self.arguments = tuple(arguments)
        self._evaluate = evaluate

    async def evaluate_arguments_async(self) -> list[Any]:
        """Evaluate every argument, left to right."""
        return [await self._evaluate(argument) for argument in self.arguments]

    def evaluate_arguments(self) -> list[Any]:
        """Evaluate every argument from a synchronous hook.

        The evaluation runs on a separate event loop in a worker thread, so
        it is safe to call while the calling loop is busy running the hook.
        """
        return run_sync(self.evaluate_arguments_async)


class ResolverHook(Generic[A]):
    """A synchronous and/or asynchronous resolver behind one awaitable call.

    Args:
        sync: Called as ``sync(name, args)``.
        async_: Awaited as ``async_(name, args)``.

    Raises:
        ValueError: If neither callable is given.
    """

    __slots__ = ("_sync", "_async")

    def __init__(
        self,
        sync: Callable[[str, A], Any] | None = None,
        async_: Callable[[str, A], Awaitable[Any]] | None = None,
    ) -> None:
        if sync is None and async_ is None:
            raise ValueError("ResolverHook requires a sync or an async callable")
        self._sync = sync
        self._async = async_

    @property
    def policy(self) -> HookPolicy:
        if self._sync is not None and self._async is not None:
            return HookPolicy.BOTH_SEQUENTIAL
        if self._async is not None:
            return HookPolicy.ASYNC
        return HookPolicy.SYNC_ONLY

    async def __call__(self, name: str, args: A) -> None:
        if self._sync is not None:
            self._sync(name, args)
        if self._async is not None:
            await self._async(name, args)

    @classmethod
    def coerce(cls, obj: Any) -> ResolverHook[Any] | None:
        """Build a hook from a plain callable, a coroutine function or a hook.

        Returns None for None so optional hook arguments pass straight
        through.

        Raises:
            TypeError: If obj is not callable.
        """
        if obj is None or isinstance(obj, ResolverHook):
            return obj
        if not callable(obj):
            raise TypeError(f"Hook must be callable, got {type(obj).__name__}")
        if inspect.iscoroutinefunction(obj) or inspect.iscoroutinefunction(
            getattr(obj, "__call__", None)
        ):
            return cls(async_=obj)
        return cls(sync=obj)

    def __repr__(self) -> str:
        return f"ResolverHook(policy={self.policy.value})"
