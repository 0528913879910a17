"""Pytest configuration and fixtures.

Provides environment isolation and small test doubles for failure sinks,
scripted async callables and retry sleeps.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import os
from typing import Any

import pytest

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class RecordingLogger:
    """Failure sink that keeps every reported error in order."""

    errors: list[BaseException] = field(default_factory=list)

    def __call__(self, error: BaseException) -> None:
        self.errors.append(error)

    @property
    def calls(self) -> int:
        return len(self.errors)


@dataclass
class ScriptedCall:
    """Async callable that replays a script of outcomes, one per call.

    Exceptions in the script are raised; anything else is returned. The last
    outcome repeats once the script is exhausted.
    """

    outcomes: list[Any]
    calls: int = 0
    raised: list[BaseException] = field(default_factory=list)

    async def __call__(self) -> Any:
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, BaseException):
            # Fresh instance per call so identity checks can tell attempts apart.
            err = type(outcome)(*outcome.args)
            self.raised.append(err)
            raise err
        return outcome


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def scripted_call() -> type[ScriptedCall]:
    return ScriptedCall


@pytest.fixture
def sleep_calls(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace ``asyncio.sleep`` with a recorder that only yields once.

    Recorded values are the requested durations in seconds.
    """
    real_sleep = asyncio.sleep
    recorded: list[float] = []

    async def fake_sleep(delay: float, result: Any = None) -> Any:
        recorded.append(delay)
        await real_sleep(0)
        return result

    monkeypatch.setattr("asyncio.sleep", fake_sleep)
    return recorded


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def isolate_safecall_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear SAFECALL_* variables so tests never see the caller's settings."""
    for key in list(os.environ.keys()):
        if key.startswith("SAFECALL_"):
            monkeypatch.delenv(key, raising=False)
