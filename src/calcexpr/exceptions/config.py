from __future__ import annotations

from typing import Any

from calcexpr.exceptions.base import CalcExprError


class ConfigError(CalcExprError):
    """A calcexpr.yaml file or CALCEXPR_* variable could not be used.

    Covers unreadable YAML, a file whose top level is not a mapping, and
    values rejected by the settings model.

    Attributes:
        message: What went wrong.
        field: Dotted path of the offending setting (``"evaluation.no_cache"``),
            when one setting is to blame.
        value: The rejected input, when known.

    Example:
        ```python
        try:
            config = load_config()
        except ConfigError as e:
            print(e.message, e.field, e.value)
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message)
