"""Environment-driven defaults for safecall.

Resolution order is defaults < ``SAFECALL_*`` environment < explicit
overrides. Values pass through the pydantic ``Settings`` schema once and are
then frozen into ``SafeUtilOptions`` / ``RetryOptions``.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from safecall.errors import ConfigurationError
from safecall.options import SafeUtilOptions
from safecall.retry import DEFAULT_INITIAL_DELAY_MS, RetryOptions

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping

    from safecall.options import ErrorLogger

ENV_PREFIX = "SAFECALL_"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSEY = {"0", "false", "no", "off", ""}


class Settings(BaseModel):
    """Schema for the environment-tunable defaults."""

    enable_log_errors: bool = Field(default=True)
    initial_delay_ms: float = Field(default=DEFAULT_INITIAL_DELAY_MS, ge=0)
    jitter: bool = Field(default=False)
    timeout_ms: float | None = Field(default=None, gt=0)

    model_config = {"extra": "forbid", "frozen": True}

    @field_validator("enable_log_errors", "jitter", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Any:
        """Accept the usual on/off spellings found in environment variables."""
        if isinstance(v, str):
            s = v.strip().lower()
            if s in _TRUTHY:
                return True
            if s in _FALSEY:
                return False
        return v

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def empty_timeout_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def load_env() -> dict[str, Any]:
    """Read ``SAFECALL_*`` variables that name a ``Settings`` field."""
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            config[field_name] = value
    return config


def resolve_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    fields: Collection[str] | None = None,
) -> Settings:
    """Merge environment and overrides, validated through ``Settings``.

    When ``fields`` is given, only those environment variables are read;
    the rest keep their defaults.
    """
    env = load_env()
    if fields is not None:
        env = {k: v for k, v in env.items() if k in fields}
    merged = {**env, **dict(overrides or {})}
    try:
        return Settings.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid safecall settings: {e.errors(include_url=False)}",
            hint=f"Check {ENV_PREFIX}* environment variables and overrides.",
        ) from e


def resolve_options(
    overrides: Mapping[str, Any] | None = None,
    *,
    logger: ErrorLogger | None = None,
) -> SafeUtilOptions:
    """Build factory options from environment and overrides.

    Only ``SAFECALL_ENABLE_LOG_ERRORS`` is read from the environment, so a
    malformed retry variable cannot break the default instance.

    Example:
        utils = create_safe_utils(resolve_options({"enable_log_errors": False}))
    """
    settings = resolve_settings(overrides, fields=("enable_log_errors",))
    if logger is None:
        return SafeUtilOptions(enable_log_errors=settings.enable_log_errors)
    return SafeUtilOptions(enable_log_errors=settings.enable_log_errors, logger=logger)


def retry_options(
    retries: int, overrides: Mapping[str, Any] | None = None
) -> RetryOptions:
    """Build ``RetryOptions`` using environment-provided delay/jitter/timeout."""
    settings = resolve_settings(overrides)
    return RetryOptions(
        retries=retries,
        initial_delay_ms=settings.initial_delay_ms,
        jitter=settings.jitter,
        timeout_ms=settings.timeout_ms,
    )
