"""Attempt loop driving retries with backoff.

The scheduler calls an attempt function with a 0-indexed attempt number until
it returns Ok, returns a non-recoverable Err, or the budget runs out. It
decides first and sleeps second, so the final failed attempt never waits.

Example:
    >>> def attempt(i: int) -> Result[None, RetryError]:
    ...     return Ok(None) if i == 2 else Err(transport_failure(OSError("reset")))
    >>> run_with_backoff(attempt, attempts=5, base_delay=0.1, strategy="Linear").is_ok()
    True
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable

from retryhttp.foundation.errors import (
    Err,
    InvalidConfigurationError,
    Ok,
    Result,
    RetryError,
    backoff_exhausted,
)

from .config import RetryConfig

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger("retryhttp.retry")

AttemptFn = Callable[[int], Result[None, RetryError]]
AsyncAttemptFn = Callable[[int], "Awaitable[Result[None, RetryError]]"]
SleepFn = Callable[[float], object]
AsyncSleepFn = Callable[[float], "Awaitable[object]"]
OnRetry = Callable[[int, RetryError, float], None]


class BackoffScheduler:
    """Runs attempt functions under a fixed RetryConfig.

    Holds no per-run state, so one scheduler may drive many concurrent runs.

    Args:
        config: Attempt budget, base delay and strategy
        sleep: Blocking wait used between attempts (default: time.sleep)
        asleep: Awaitable wait used by arun (default: asyncio.sleep)
        on_retry: Called as on_retry(next_attempt, error, delay) before each wait
    """

    __slots__ = ("_config", "_sleep", "_asleep", "_on_retry")

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        sleep: SleepFn = time.sleep,
        asleep: AsyncSleepFn = asyncio.sleep,
        on_retry: OnRetry | None = None,
    ) -> None:
        self._config = config or RetryConfig()
        self._sleep, self._asleep, self._on_retry = sleep, asleep, on_retry

    @property
    def config(self) -> RetryConfig:
        return self._config

    def run(self, attempt_fn: AttemptFn, *, sleep: SleepFn | None = None) -> Result[None, RetryError]:
        """Drive attempt_fn synchronously. `sleep` overrides the wait for this run."""
        cfg, wait = self._config, sleep if sleep is not None else self._sleep
        last: RetryError | None = None
        for attempt in range(cfg.attempts):
            if (result := attempt_fn(attempt)).is_ok():
                return result
            last = result.unwrap_err()
            if not last.is_retryable:
                logger.debug(f"Attempt {attempt + 1}/{cfg.attempts} stopped the loop ({last.code})")
                return result
            if attempt + 1 < cfg.attempts:
                wait(self._before_retry(attempt + 1, last))
        return self._exhausted(last)  # type: ignore[arg-type]

    async def arun(self, attempt_fn: AsyncAttemptFn, *, asleep: AsyncSleepFn | None = None) -> Result[None, RetryError]:
        """Async twin of run(); awaits attempt_fn and the wait."""
        cfg, wait = self._config, asleep if asleep is not None else self._asleep
        last: RetryError | None = None
        for attempt in range(cfg.attempts):
            if (result := await attempt_fn(attempt)).is_ok():
                return result
            last = result.unwrap_err()
            if not last.is_retryable:
                logger.debug(f"Attempt {attempt + 1}/{cfg.attempts} stopped the loop ({last.code})")
                return result
            if attempt + 1 < cfg.attempts:
                await wait(self._before_retry(attempt + 1, last))
        return self._exhausted(last)  # type: ignore[arg-type]

    def _before_retry(self, next_attempt: int, error: RetryError) -> float:
        delay = self._config.delay(next_attempt)
        logger.info(
            f"Retry {next_attempt}/{self._config.attempts - 1} after {delay:.3f}s "
            f"(code: {error.code}{f', status: {error.status_code}' if error.status_code else ''})"
        )
        if self._on_retry is not None:
            self._on_retry(next_attempt, error, delay)
        return delay

    def _exhausted(self, last: RetryError) -> Result[None, RetryError]:
        logger.warning(f"Backoff exhausted after {self._config.attempts} attempt(s): {last.message}")
        return Err(backoff_exhausted(last, self._config.attempts))


def _scheduler_for(
    attempts: int, base_delay: float, strategy: object, max_delay: float | None, on_retry: OnRetry | None,
) -> Result[BackoffScheduler, RetryError]:
    try:
        config = RetryConfig(attempts=attempts, base_delay=base_delay, strategy=strategy, max_delay=max_delay)
    except InvalidConfigurationError as e:
        return Err(e.error)
    return Ok(BackoffScheduler(config, on_retry=on_retry))


def run_with_backoff(
    attempt_fn: AttemptFn,
    *,
    attempts: int,
    base_delay: float,
    strategy: object,
    sleep: SleepFn = time.sleep,
    max_delay: float | None = None,
    on_retry: OnRetry | None = None,
) -> Result[None, RetryError]:
    """One-shot retry loop.

    Invalid strategy or attempt counts return Err(INVALID_CONFIGURATION)
    before attempt_fn is ever called.
    """
    return _scheduler_for(attempts, base_delay, strategy, max_delay, on_retry).flat_map(
        lambda s: s.run(attempt_fn, sleep=sleep)
    )


async def arun_with_backoff(
    attempt_fn: AsyncAttemptFn,
    *,
    attempts: int,
    base_delay: float,
    strategy: object,
    sleep: AsyncSleepFn = asyncio.sleep,
    max_delay: float | None = None,
    on_retry: OnRetry | None = None,
) -> Result[None, RetryError]:
    """Async one-shot retry loop."""
    scheduler = _scheduler_for(attempts, base_delay, strategy, max_delay, on_retry)
    if scheduler.is_err():
        return Err(scheduler.unwrap_err())
    return await scheduler.unwrap().arun(attempt_fn, asleep=sleep)
