"""Exception hierarchy for safecall."""

from __future__ import annotations

from typing import Any


class SafeCallError(Exception):
    """Base exception for all safecall errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class NormalizedError(SafeCallError):
    """A non-exception value was raised or rejected.

    The message is the value's string form; the value itself is kept on
    ``original`` so callers can still inspect it.
    """

    def __init__(self, message: str, *, original: Any = None) -> None:
        super().__init__(message)
        self.original = original


class DeadlineExceededError(SafeCallError, TimeoutError):
    """An awaited computation did not settle before its deadline."""

    def __init__(self, timeout_ms: float) -> None:
        super().__init__(
            f"Timeout after {format_ms(timeout_ms)}ms",
            hint="Raise timeout_ms or make the awaited call faster.",
        )
        self.timeout_ms = timeout_ms


def format_ms(ms: float) -> str:
    """Render milliseconds without a trailing ``.0`` for whole values."""
    if isinstance(ms, float) and ms.is_integer():
        return str(int(ms))
    return str(ms)


class ConfigurationError(SafeCallError):
    """Options or settings failed validation."""


def normalize_error(error: object) -> BaseException:
    """Coerce any raised or rejected value into an exception.

    Exceptions pass through unchanged (same object, not a copy). Anything
    else becomes a ``NormalizedError`` whose message is ``str(error)``.
    """
    if isinstance(error, BaseException):
        return error
    return NormalizedError(str(error), original=error)
