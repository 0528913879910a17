"""Retry options and exponential backoff.

Retries are purely count- and delay-based: there is no classification of
which failures are worth retrying, no elapsed-time budget, and no circuit
breaking. Every failure of an attempt is retried while attempts remain.
"""

from __future__ import annotations

from dataclasses import dataclass
import random

from safecall.errors import ConfigurationError

DEFAULT_INITIAL_DELAY_MS = 100.0


@dataclass(frozen=True)
class RetryOptions:
    """Bounded retry options with exponential backoff and optional jitter.

    ``retries`` counts retries, not attempts: ``retries=2`` allows up to
    three calls. ``timeout_ms`` bounds each attempt separately.
    """

    retries: int
    initial_delay_ms: float = DEFAULT_INITIAL_DELAY_MS
    jitter: bool = False  # "full jitter" when enabled
    timeout_ms: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if (
            not isinstance(self.retries, int)
            or isinstance(self.retries, bool)
            or self.retries < 0
        ):
            raise ConfigurationError(
                f"retries must be an integer >= 0, got {self.retries!r}",
                hint="retries=0 means a single attempt with no retry.",
            )
        if self.initial_delay_ms < 0:
            raise ConfigurationError(
                f"initial_delay_ms must be >= 0, got {self.initial_delay_ms!r}",
                hint="This is the wait before the first retry, in milliseconds.",
            )
        if self.timeout_ms is not None and self.timeout_ms <= 0:
            raise ConfigurationError(
                f"timeout_ms must be > 0 or None, got {self.timeout_ms!r}",
                hint="Omit timeout_ms to await each attempt without a deadline.",
            )

    @property
    def max_attempts(self) -> int:
        return self.retries + 1


def calculate_delay(attempt: int, options: RetryOptions) -> float:
    """Return the wait in milliseconds after the zero-based ``attempt`` failed.

    The base delay doubles per attempt. With jitter the result is drawn
    uniformly from ``[0, base)``.
    """
    base = options.initial_delay_ms * (2**attempt)
    if not options.jitter:
        return base
    return random.random() * base  # noqa: S311
