"""Parameter storage for Expression instances."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any

__all__ = ["ParameterMap"]


class ParameterMap(MutableMapping[str, Any]):
    """Mapping of parameter names to values.

    With ``ignore_case=True`` lookups fold case, while iteration still yields
    each name as it was last assigned.

    Example:
        >>> params = ParameterMap({"Price": 10}, ignore_case=True)
        >>> params["price"]
        10
        >>> list(params)
        ['Price']
    """

    def __init__(
        self,
        initial: Mapping[str, Any] | None = None,
        *,
        ignore_case: bool = False,
    ) -> None:
        self._ignore_case = ignore_case
        self._entries: dict[str, tuple[str, Any]] = {}
        if initial:
            self.update(initial)

    @property
    def ignore_case(self) -> bool:
        return self._ignore_case

    def _key(self, name: str) -> str:
        return name.casefold() if self._ignore_case else name

    def __getitem__(self, name: str) -> Any:
        return self._entries[self._key(name)][1]

    def __setitem__(self, name: str, value: Any) -> None:
        self._entries[self._key(name)] = (name, value)

    def __delitem__(self, name: str) -> None:
        del self._entries[self._key(name)]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._key(name) in self._entries

    def __repr__(self) -> str:
        items = {name: value for name, value in self._entries.values()}
        return f"ParameterMap({items!r}, ignore_case={self._ignore_case})"
