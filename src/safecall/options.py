"""Factory-level options for the safe executors."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging

from safecall.errors import ConfigurationError

ErrorLogger = Callable[[BaseException], object]

_error_log = logging.getLogger("safecall.errors")


def log_to_stderr(error: BaseException) -> None:
    """Default failure sink.

    Emits at ERROR on the ``safecall.errors`` logger. With logging left
    unconfigured the record lands on stderr through ``logging.lastResort``.
    """
    _error_log.error("%s: %s", type(error).__name__, error, exc_info=error)


@dataclass(frozen=True)
class SafeUtilOptions:
    """Immutable options captured once by ``create_safe_utils``."""

    enable_log_errors: bool = True
    #: Called once per failure with the normalized exception.
    logger: ErrorLogger = log_to_stderr

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if not isinstance(self.enable_log_errors, bool):
            raise ConfigurationError(
                "enable_log_errors must be a bool",
                hint="Pass enable_log_errors=False to silence failure logging.",
            )
        if not callable(self.logger):
            raise ConfigurationError(
                f"logger must be callable, got {type(self.logger).__name__}",
                hint="Pass a one-argument callable such as logging.getLogger(...).error.",
            )

    def report(self, error: BaseException) -> None:
        """Pass ``error`` to the logger when logging is enabled."""
        if self.enable_log_errors:
            self.logger(error)
