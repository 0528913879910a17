"""Safe executors: run callables and awaitables without raising.

``create_safe_utils`` binds a ``SafeUtilOptions`` once and returns a
``SafeUtils`` whose six operations share that failure-logging policy:

- ``safe``: synchronous call -> ``SafeResult``
- ``safe_async``: awaited call -> ``SafeResult``
- ``safe_all``: settle-all over many awaitables -> ``list[SafeResult]``
- ``safe_observable``: call -> ``Observable`` that errors on failure
- ``safe_observable_all``: settle-all delivered as a one-item ``Observable``
- ``safe_with_retries``: bounded retries with backoff and per-attempt deadline

Every failure is normalized, reported to the logger exactly once (when
logging is enabled), and then returned. Only ``safe_observable`` surfaces
failure through a channel other than the result: the stream's ``on_error``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, TypeVar

import reactivex
from reactivex.disposable import Disposable

from safecall.errors import SafeCallError, normalize_error
from safecall.options import SafeUtilOptions
from safecall.result import SafeResult
from safecall.retry import calculate_delay
from safecall.timeout import race_with_timeout

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from reactivex import Observable
    from reactivex.abc import DisposableBase, ObserverBase, SchedulerBase

    from safecall.retry import RetryOptions

T = TypeVar("T")

log = logging.getLogger(__name__)


def _no_running_loop(exc: RuntimeError) -> SafeCallError:
    err = SafeCallError(
        "awaitable results need a running event loop",
        hint="Subscribe from inside a coroutine, or await the observable.",
    )
    err.__cause__ = exc
    return err


class SafeUtils:
    """The six safe operations bound to one set of options."""

    __slots__ = ("options",)

    def __init__(self, options: SafeUtilOptions) -> None:
        self.options = options

    def __repr__(self) -> str:
        return f"SafeUtils({self.options!r})"

    def _failure(self, error: object) -> BaseException:
        normalized = normalize_error(error)
        self.options.report(normalized)
        return normalized

    def safe(self, fn: Callable[[], T]) -> SafeResult[T]:
        """Call ``fn`` and capture its return value or exception.

        Example:
            err, data = safe(lambda: json.loads(text))
        """
        try:
            return SafeResult(None, fn())
        except Exception as exc:
            return SafeResult(self._failure(exc), None)

    async def safe_async(self, fn: Callable[[], Awaitable[T]]) -> SafeResult[T]:
        """Await ``fn()``; the returned coroutine never raises ``Exception``.

        Example:
            err, body = await safe_async(lambda: client.get(url))
        """
        try:
            return SafeResult(None, await fn())
        except Exception as exc:
            return SafeResult(self._failure(exc), None)

    async def _settle(self, item: Awaitable[T]) -> SafeResult[T]:
        try:
            return SafeResult(None, await item)
        except Exception as exc:
            return SafeResult(self._failure(exc), None)

    async def safe_all(self, items: Iterable[Awaitable[T]]) -> list[SafeResult[T]]:
        """Await every item concurrently and collect one result per item.

        Output order matches input order regardless of completion order.
        A failing item never affects the others.
        """
        return list(await asyncio.gather(*(self._settle(item) for item in items)))

    def safe_observable(self, fn: Callable[[], T | Awaitable[T]]) -> Observable[T]:
        """Wrap ``fn`` in a lazy single-value stream.

        ``fn`` runs once per subscription. A plain return value is emitted and
        the stream completes. An awaitable is scheduled on the running loop
        and its outcome emitted the same way. Any failure terminates the stream
        through ``on_error`` with the normalized exception. Subscribing without
        a running loop when ``fn`` returns an awaitable terminates the stream
        with a ``SafeCallError``.
        """

        def subscribe(
            observer: ObserverBase[T], scheduler: SchedulerBase | None = None
        ) -> DisposableBase:
            try:
                outcome = fn()
            except Exception as exc:
                observer.on_error(self._failure(exc))
                return Disposable()

            if not inspect.isawaitable(outcome):
                observer.on_next(outcome)
                observer.on_completed()
                return Disposable()

            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                if inspect.iscoroutine(outcome):
                    outcome.close()
                observer.on_error(self._failure(_no_running_loop(exc)))
                return Disposable()

            task = asyncio.ensure_future(outcome, loop=loop)

            def on_done(fut: asyncio.Future[T]) -> None:
                if fut.cancelled():
                    return
                exc = fut.exception()
                if exc is not None:
                    observer.on_error(self._failure(exc))
                    return
                observer.on_next(fut.result())
                observer.on_completed()

            task.add_done_callback(on_done)
            return Disposable(task.cancel)

        return reactivex.create(subscribe)

    def safe_observable_all(
        self, items: Iterable[Awaitable[T]]
    ) -> Observable[list[SafeResult[T]]]:
        """Settle all items like ``safe_all`` and emit the list as one item.

        The stream never errors because of item failures; those are carried
        inside the emitted results. The items are settled once, on the first
        subscription; later subscribers receive the same results.
        """
        pending = list(items)
        settled: list[asyncio.Future[list[SafeResult[T]]]] = []

        def factory(_: SchedulerBase | None) -> Observable[list[SafeResult[T]]]:
            if not settled:
                try:
                    asyncio.get_running_loop()
                except RuntimeError as exc:
                    return reactivex.throw(self._failure(_no_running_loop(exc)))
                settled.append(asyncio.ensure_future(self.safe_all(pending)))
            # One subscriber disposing early must not cancel the shared run.
            return reactivex.from_future(asyncio.shield(settled[0]))

        return reactivex.defer(factory)

    async def safe_with_retries(
        self, fn: Callable[[], Awaitable[T]], options: RetryOptions
    ) -> SafeResult[T]:
        """Call ``fn`` up to ``options.retries + 1`` times until it succeeds.

        Each attempt calls ``fn`` afresh and, when ``options.timeout_ms`` is
        set, races that call against its own deadline. Every failed attempt is
        reported; after the last one its error is returned.

        Example:
            err, body = await safe_with_retries(
                lambda: client.get(url), RetryOptions(retries=3, timeout_ms=2000)
            )
        """
        last_error: BaseException | None = None
        for attempt in range(options.max_attempts):
            try:
                pending = fn()
                if options.timeout_ms is not None:
                    value = await race_with_timeout(pending, options.timeout_ms)
                else:
                    value = await pending
            except Exception as exc:
                last_error = self._failure(exc)
                if attempt < options.retries:
                    delay_ms = calculate_delay(attempt, options)
                    log.debug(
                        "Attempt %d/%d failed (%s); retrying in %.1fms",
                        attempt + 1,
                        options.max_attempts,
                        type(last_error).__name__,
                        delay_ms,
                    )
                    await asyncio.sleep(delay_ms / 1000)
            else:
                return SafeResult(None, value)

        return SafeResult(last_error, None)


def create_safe_utils(options: SafeUtilOptions | None = None) -> SafeUtils:
    """Create the six safe operations bound to ``options``.

    Args:
        options: Logging behavior shared by every operation. Defaults to
            ``SafeUtilOptions()``: logging enabled, sink ``log_to_stderr``.

    Returns:
        A ``SafeUtils``; each call returns a new, independent instance.

    Example:
        utils = create_safe_utils(SafeUtilOptions(enable_log_errors=False))
        err, value = utils.safe(lambda: int("x"))
    """
    return SafeUtils(options if options is not None else SafeUtilOptions())


__all__ = ["SafeUtils", "create_safe_utils"]

