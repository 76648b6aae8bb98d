from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from lazywire.exceptions import (
    CircularDependencyReason,
    LazyWireAsyncInitializerInSyncContextError,
    LazyWireCircularDependencyError,
)
from lazywire.keys import Key

logger = logging.getLogger(__name__)

# Three calls are needed so that every entry taking part in a cycle has
# accumulated at least two calls by the time the error is built.
CRITICAL_AMOUNT_OF_CALLS = 3
SUSPICIOUS_AMOUNT_OF_CALLS = 2
SUSPICIOUS_DURATION_SHARE = 0.9

Initializer = Callable[[], Any]
AsyncInitializer = Callable[[], Awaitable[Any]]
CircularErrorFactory = Callable[[CircularDependencyReason], LazyWireCircularDependencyError]

_MISSING: Any = object()


def is_async_callable(obj: object) -> bool:
    """Return whether calling ``obj`` produces a coroutine."""
    if inspect.iscoroutinefunction(obj):
        return True
    call = getattr(obj, "__call__", None)  # noqa: B004
    return not inspect.isclass(obj) and inspect.iscoroutinefunction(call)


class Entry:
    """Memoize the value of one registry key.

    An entry is Idle until first requested. A synchronous initializer resolves
    it on the spot; an awaitable result makes it Pending, and every concurrent
    ``aget`` shares that single computation. A failed attempt returns the entry
    to Idle so a later request can retry.

    Re-entering the initializer of an entry that is still being built is how
    synchronous cycles show up: the third nested call fails with
    ``CircularDependencyReason.MULTIPLE_INITIALIZATION``. Asynchronous cycles
    wait on each other's pending computation and fail when the registry
    timeout elapses.
    """

    def __init__(
        self,
        key: Key,
        initializer: Initializer,
        *,
        dependencies: tuple[Key, ...] | None = None,
        async_initializer: AsyncInitializer | None = None,
    ) -> None:
        self.key = key
        self.initializer = initializer
        # Used instead of ``initializer`` when the entry is resolved by ``aget``.
        self.async_initializer = async_initializer
        self.dependencies = dependencies
        self.is_async_initializer = is_async_callable(initializer)
        self.initializer_calls = 0
        self.initialization_started_at: float | None = None
        self._instance: Any = _MISSING
        self._pending: asyncio.Future[Any] | None = None
        # Invocations started but not settled yet.
        self._active_calls = 0

    @property
    def name(self) -> str:
        return self.key.display_name

    @property
    def is_resolved(self) -> bool:
        return self._instance is not _MISSING

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    @property
    def instance(self) -> Any:
        """Return the memoized value, raising ``LookupError`` when not resolved yet."""
        if self._instance is _MISSING:
            msg = f"{self.name!r} is not resolved"
            raise LookupError(msg)
        return self._instance

    @property
    def initialization_duration(self) -> float:
        """Seconds spent waiting for the current pending computation."""
        if self.initialization_started_at is None:
            return 0.0
        return time.monotonic() - self.initialization_started_at

    def is_suspicious(self, max_wait: float) -> bool:
        """Return whether the entry may take part in a cycle reported by another entry."""
        if self.is_resolved:
            return False
        return (
            self.initializer_calls >= SUSPICIOUS_AMOUNT_OF_CALLS
            or (
                self.initialization_started_at is not None
                and self.initialization_duration >= max_wait * SUSPICIOUS_DURATION_SHARE
            )
        )

    def get(self, circular_error: CircularErrorFactory) -> Any:
        """Resolve without suspending.

        Raises:
            LazyWireAsyncInitializerInSyncContextError: The value can only be
                produced by awaiting.
            LazyWireCircularDependencyError: The initializer was re-entered too
                many times.

        """
        if self._instance is not _MISSING:
            return self._instance
        if self._pending is not None:
            raise LazyWireAsyncInitializerInSyncContextError(self.key)

        result = self._invoke(self.initializer, circular_error)
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            self._fail()
            raise LazyWireAsyncInitializerInSyncContextError(self.key)
        return self._resolve(result)

    async def aget(self, max_wait: float, circular_error: CircularErrorFactory) -> Any:
        """Resolve, awaiting a pending computation for at most ``max_wait`` seconds."""
        if self._instance is not _MISSING:
            return self._instance
        if self._pending is None:
            result = self._invoke(self.async_initializer or self.initializer, circular_error)
            if not inspect.isawaitable(result):
                return self._resolve(result)
            self.initialization_started_at = time.monotonic()
            self._pending = asyncio.ensure_future(
                self._settle(result, max_wait, circular_error),
            )
        # Shielded so that a cancelled waiter does not cancel the shared computation.
        return await asyncio.shield(self._pending)

    def _invoke(self, initializer: Initializer, circular_error: CircularErrorFactory) -> Any:
        if self.initializer_calls + 1 >= CRITICAL_AMOUNT_OF_CALLS:
            raise circular_error(CircularDependencyReason.MULTIPLE_INITIALIZATION)

        self.initializer_calls += 1
        logger.debug("Initializing %r (call %d)", self.name, self.initializer_calls)
        self._active_calls += 1
        try:
            return initializer()
        except BaseException:
            self._fail()
            raise

    async def _settle(
        self,
        awaitable: Awaitable[Any],
        max_wait: float,
        circular_error: CircularErrorFactory,
    ) -> Any:
        task = asyncio.ensure_future(awaitable)
        try:
            done, _ = await asyncio.wait({task}, timeout=max_wait)
            if not done:
                error = circular_error(CircularDependencyReason.TIMEOUT)
                task.add_done_callback(self._discard_late_settlement)
                raise error
            value = task.result()
        except BaseException:
            self._fail()
            raise
        return self._resolve(value)

    def _resolve(self, value: Any) -> Any:
        self._active_calls -= 1
        self._pending = None
        self.initialization_started_at = None
        # A nested call may have resolved the entry already; the first value wins.
        if self._instance is _MISSING:
            self._instance = value
            logger.debug("Initialized %r", self.name)
        return self._instance

    def _fail(self) -> None:
        self._active_calls -= 1
        self._pending = None
        self.initialization_started_at = None
        if self._active_calls == 0:
            self.initializer_calls = 0

    def _discard_late_settlement(self, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is None:
            logger.warning("Discarding value of %r that settled after its timeout", self.name)
        else:
            logger.warning(
                "Discarding failure of %r that settled after its timeout: %r",
                self.name,
                error,
            )


__all__ = ["CRITICAL_AMOUNT_OF_CALLS", "Entry", "Initializer", "is_async_callable"]
