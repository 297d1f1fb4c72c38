from __future__ import annotations


class CalcExprError(Exception):
    """Base exception class for all calcexpr-specific errors.

    This is the root of the calcexpr exception hierarchy. All custom exceptions
    raised by the engine inherit from this class. This allows host applications
    to catch every engine error at their boundary while letting system
    exceptions propagate naturally.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            Expression("1 + [x]").evaluate()
        except CalcExprError as e:
            logger.error(f"formula failed: {e.message}")
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the CalcExprError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
