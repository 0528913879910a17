"""The two-slot result returned by every non-stream operation.

A ``SafeResult`` is either ``(None, value)`` or ``(error, None)``; the error
slot alone decides which. It is a ``NamedTuple``, so it unpacks and compares
like the plain pair::

    err, data = safe(lambda: json.loads(text))
    if err is not None:
        ...
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, NamedTuple, TypeVar

from safecall.errors import normalize_error

T = TypeVar("T")


class SafeResult(NamedTuple, Generic[T]):
    """Outcome of a guarded call: an error or a value, never both."""

    error: BaseException | None
    value: T | None

    @classmethod
    def ok(cls, value: T) -> SafeResult[T]:
        return cls(None, value)

    @classmethod
    def fail(cls, error: object) -> SafeResult[Any]:
        return cls(normalize_error(error), None)

    def unwrap(self) -> T | None:
        """Return the value, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value


def is_success(result: Sequence[Any]) -> bool:
    """Return True when the result's error slot is empty."""
    return result[0] is None


def is_failure(result: Sequence[Any]) -> bool:
    """Return True when the result carries an error."""
    return result[0] is not None
