"""Deadline racing for awaitables.

A deadline race is not a cancellation: when the timer wins, the awaited
computation keeps running in the background and its outcome is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from safecall.errors import DeadlineExceededError, format_ms

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")

log = logging.getLogger(__name__)

# Strong references to detached losers; the event loop only keeps weak ones.
_detached: set[asyncio.Future[Any]] = set()


def _retrieve_late_exception(fut: asyncio.Future[Any]) -> None:
    """Avoid 'Future exception was never retrieved' for discarded futures."""
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        log.debug("Discarded late failure after deadline: %r", exc)


def _detach(fut: asyncio.Future[Any]) -> None:
    _detached.add(fut)
    fut.add_done_callback(_detached.discard)
    fut.add_done_callback(_retrieve_late_exception)


async def race_with_timeout(pending: Awaitable[T], ms: float) -> T:
    """Await ``pending`` for at most ``ms`` milliseconds.

    Returns or raises whatever ``pending`` settles with if it settles first.
    Otherwise raises ``DeadlineExceededError`` (message ``Timeout after
    {ms}ms``) and leaves ``pending`` running to completion, detached.
    """
    fut = asyncio.ensure_future(pending)
    try:
        done, _ = await asyncio.wait({fut}, timeout=ms / 1000)
    except asyncio.CancelledError:
        _detach(fut)
        raise
    if fut in done:
        return fut.result()

    log.debug(
        "Deadline of %sms elapsed; detaching pending computation", format_ms(ms)
    )
    _detach(fut)
    raise DeadlineExceededError(ms)


safe_timeout = race_with_timeout
