"""safecall: failures as values for sync, async, batch and stream code.

Public API:
    - safe(), safe_async(), safe_all(): return ``SafeResult`` pairs
    - safe_observable(), safe_observable_all(): return ``reactivex`` streams
    - safe_with_retries(): bounded retries with backoff and deadlines
    - create_safe_utils(): the same six operations with custom options
    - is_success(), is_failure(): inspect a result's error slot

Example:
    err, data = safe(lambda: json.loads(text))
    if is_failure((err, data)):
        ...
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from safecall.config import resolve_options
from safecall.errors import (
    ConfigurationError,
    DeadlineExceededError,
    NormalizedError,
    SafeCallError,
    normalize_error,
)
from safecall.executor import SafeUtils, create_safe_utils
from safecall.options import SafeUtilOptions, log_to_stderr
from safecall.result import SafeResult, is_failure, is_success
from safecall.retry import RetryOptions, calculate_delay
from safecall.timeout import race_with_timeout, safe_timeout

try:
    __version__ = version("safecall")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# No NullHandler here: the default sink relies on logging.lastResort.

_default = create_safe_utils(resolve_options())

safe = _default.safe
safe_async = _default.safe_async
safe_all = _default.safe_all
safe_observable = _default.safe_observable
safe_observable_all = _default.safe_observable_all
safe_with_retries = _default.safe_with_retries

__all__ = [
    "ConfigurationError",
    "DeadlineExceededError",
    "NormalizedError",
    "RetryOptions",
    "SafeCallError",
    "SafeResult",
    "SafeUtilOptions",
    "SafeUtils",
    "calculate_delay",
    "create_safe_utils",
    "is_failure",
    "is_success",
    "log_to_stderr",
    "normalize_error",
    "race_with_timeout",
    "safe",
    "safe_all",
    "safe_async",
    "safe_observable",
    "safe_observable_all",
    "safe_timeout",
    "safe_with_retries",
]
