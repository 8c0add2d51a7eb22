"""
Exceptions for EVM processing.

Configuration problems are raised at construction time, shape problems at
the call that introduced them. Warm-up is not an error.
"""

from typing import Any, Optional, Tuple


class EVMError(Exception):
    """Base exception for all magnification errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationError(EVMError, ValueError):
    """Raised when a filter or pipeline parameter is invalid."""

    def __init__(self, message: str, parameter: Optional[str] = None,
                 value: Any = None, *args: object) -> None:
        super().__init__(message, *args)
        self.parameter = parameter
        self.value = value


class FilterDesignError(EVMError):
    """Raised when designed taps fail the symmetry self-check."""


class ShapeMismatchError(EVMError, ValueError):
    """Raised when a frame does not match the established frame shape."""

    def __init__(self, message: str, expected: Optional[Tuple[int, ...]] = None,
                 actual: Optional[Tuple[int, ...]] = None, *args: object) -> None:
        super().__init__(message, *args)
        self.expected = expected
        self.actual = actual


class VideoIOError(EVMError):
    """Raised when a video cannot be opened or written."""

    def __init__(self, message: str, path: Optional[str] = None, *args: object) -> None:
        super().__init__(message, *args)
        self.path = path
