"""Process-wide cache of compiled expressions.

Source text maps to a weak reference to its AST. The cache never keeps a
tree alive: once no Expression (or other caller) holds the tree, the entry
becomes a miss and the next pruning sweep drops it.

Locking follows a readers-writer discipline:
- lookups and the dead-entry scan share the lock
- insertion, removal and reset hold it exclusively
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager

from calcexpr.domain.nodes import LogicalExpression
from calcexpr.exceptions import ExpressionSyntaxError
from calcexpr.expressions.parser import parse
from calcexpr.logging import get_logger

__all__ = [
    "CompiledExpressionCache",
    "default_cache",
    "compile_expression",
    "set_cache_enabled",
    "is_cache_enabled",
]

logger = get_logger(__name__)


class _ReadWriteLock:
    """Shared/exclusive lock built on a condition variable.

    Waiting writers block new readers, so a steady stream of lookups cannot
    starve insertion. Not reentrant.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._condition:
            while self._writer or self._writers_waiting:
                self._condition.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._condition:
                self._readers -= 1
                if self._readers == 0:
                    self._condition.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._condition:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._condition.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._condition:
                self._writer = False
                self._condition.notify_all()


class CompiledExpressionCache:
    """Map from source text to a weakly held compiled AST.

    Example:
        ```python
        cache = CompiledExpressionCache()
        tree = cache.compile("a + 1")
        assert cache.compile("a + 1") is tree
        ```
    """

    def __init__(self, *, enabled: bool = True) -> None:
        self._entries: dict[str, weakref.ref[LogicalExpression]] = {}
        self._lock = _ReadWriteLock()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        with self._lock.write_locked():
            self._enabled = value
            if not value:
                self._entries.clear()
        if not value:
            logger.debug("cache_disabled")

    def compile(self, text: str, nocache: bool = False) -> LogicalExpression:
        """Return the AST for ``text``, parsing only on a cache miss.

        Args:
            text: Formula source text. Keys are case-sensitive.
            nocache: Parse unconditionally and leave the cache untouched.

        Returns:
            The compiled AST.

        Raises:
            ExpressionSyntaxError: If the text does not parse.
        """
        use_cache = self._enabled and not nocache
        if use_cache:
            cached = self._lookup(text)
            if cached is not None:
                return cached

        result = parse(text)
        if result.errors or result.expression is None:
            raise ExpressionSyntaxError(result.errors, text)
        expression = result.expression

        if use_cache:
            with self._lock.write_locked():
                # The switch may have flipped during the parse
                inserted = self._enabled
                if inserted:
                    self._entries[text] = weakref.ref(expression)
            if inserted:
                logger.debug("expression_cached", expression=text)
                self.prune()

        return expression

    def _lookup(self, text: str) -> LogicalExpression | None:
        with self._lock.read_locked():
            ref = self._entries.get(text)
        return ref() if ref is not None else None

    def prune(self) -> int:
        """Drop entries whose tree has been reclaimed.

        Returns:
            Number of entries removed.
        """
        with self._lock.read_locked():
            dead = [key for key, ref in self._entries.items() if ref() is None]
        if not dead:
            return 0

        removed = 0
        with self._lock.write_locked():
            for key in dead:
                ref = self._entries.get(key)
                # Re-inserted with a live tree since the scan
                if ref is not None and ref() is None:
                    del self._entries[key]
                    removed += 1

        if removed:
            logger.debug("cache_entries_pruned", count=removed)
        return removed

    def clear(self) -> None:
        with self._lock.write_locked():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        return self._lookup(text) is not None


default_cache = CompiledExpressionCache()


def compile_expression(text: str, nocache: bool = False) -> LogicalExpression:
    """Compile ``text`` through the process-wide cache."""
    return default_cache.compile(text, nocache)


def set_cache_enabled(enabled: bool) -> None:
    """Turn the process-wide cache on or off. Turning it off empties it."""
    default_cache.enabled = enabled


def is_cache_enabled() -> bool:
    return default_cache.enabled
