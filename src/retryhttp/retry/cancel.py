"""Cooperative cancellation token.

A CancelToken is owned by the caller and observed by clients: it fires when
cancel() is called or when its deadline passes. Waits through the token
(sleep / asleep) wake early when it fires, so inter-attempt delays never
outlive the caller's interest.

Example:
    >>> token = CancelToken.with_timeout(5.0)
    >>> client = RetryableClient(cancel=token)
    >>> # from another thread or task:
    >>> token.cancel("shutting down")
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Callable


class CancelToken:
    """Thread-safe cancellation source with an optional deadline.

    Attributes:
        deadline: Absolute time.monotonic() value after which the token is
            cancelled, or None for no deadline
    """

    __slots__ = ("_event", "_deadline", "_reason", "_lock", "_waiters")

    def __init__(self, *, deadline: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = deadline
        self._reason: str | None = None
        self._lock = threading.Lock()
        self._waiters: set[Callable[[], None]] = set()

    @classmethod
    def with_timeout(cls, seconds: float) -> CancelToken:
        """Token that expires `seconds` from now."""
        return cls(deadline=time.monotonic() + seconds)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        """Whether cancel() was called or the deadline has passed."""
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel("deadline exceeded")
            return True
        return False

    @property
    def reason(self) -> str | None:
        return self._reason

    def remaining(self) -> float | None:
        """Seconds until the deadline (never negative), None without one."""
        return None if self._deadline is None else max(0.0, self._deadline - time.monotonic())

    def cancel(self, reason: str = "cancelled") -> None:
        """Fire the token and wake every pending wait. Idempotent."""
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            waiters = tuple(self._waiters)
        for wake in waiters:
            wake()

    def _bounded(self, seconds: float) -> float:
        rem = self.remaining()
        return max(0.0, seconds if rem is None else min(seconds, rem))

    def sleep(self, seconds: float) -> bool:
        """Block up to `seconds`; return False if the token fired meanwhile."""
        if self.cancelled:
            return False
        self._event.wait(self._bounded(seconds))
        return not self.cancelled

    async def asleep(self, seconds: float) -> bool:
        """Async twin of sleep(); wakes as soon as cancel() is called."""
        if self.cancelled:
            return False
        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[None] = loop.create_future()

        def wake() -> None:
            loop.call_soon_threadsafe(_resolve, waiter)

        with self._lock:
            self._waiters.add(wake)
        try:
            if not self._event.is_set():  # cancel() may have run before registration
                await asyncio.wait({waiter}, timeout=self._bounded(seconds))
        finally:
            with self._lock:
                self._waiters.discard(wake)
            waiter.cancel()
        return not self.cancelled

    def __repr__(self) -> str:
        state = f"cancelled={self._reason!r}" if self._event.is_set() else "active"
        return f"CancelToken({state}, remaining={self.remaining()})"


def _resolve(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)
