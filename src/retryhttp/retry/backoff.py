"""Backoff strategies for the retry loop.

Delays are expressed as the wait *before* a given attempt index:
- attempt 0 never waits
- LinearBackoff: constant base delay before every retry
- ExponentialBackoff: base * 2^(attempt - 1), doubling each retry

Both accept an optional max_delay cap. Every delay is also bounded by
threading.TIMEOUT_MAX, the longest wait the sleep primitives accept.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable

from retryhttp.foundation.errors import InvalidConfigurationError


class Strategy(StrEnum):
    """Algorithm used to grow the delay between retries."""
    LINEAR = "Linear"
    EXPONENTIAL = "Exponential"

    @classmethod
    def parse(cls, value: Strategy | str) -> Strategy:
        """Coerce a strategy name, raising InvalidConfigurationError if unknown.

        Accepts the enum, its value ("Linear") or any casing of it.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise InvalidConfigurationError.from_message(
            f"invalid backoff strategy '{value}'",
            details=f"expected one of: {', '.join(m.value for m in cls)}",
        )


@runtime_checkable
class Backoff(Protocol):
    """Protocol for delay calculation.

    Attempt numbers are 0-indexed; delay(0) is always 0.
    """

    def delay(self, attempt: int) -> float:
        """Seconds to wait before running `attempt`."""
        ...


@dataclass(frozen=True, slots=True)
class LinearBackoff:
    """Constant delay before every retry.

    Attributes:
        base: Delay in seconds (default: 1.0)
        max_delay: Optional cap in seconds
    """

    base: float = 1.0
    max_delay: float | None = None

    def delay(self, attempt: int) -> float:
        if attempt <= 0:
            return 0.0
        return _capped(self.base, self.max_delay)


@dataclass(frozen=True, slots=True)
class ExponentialBackoff:
    """Doubling delay: base * 2^(attempt - 1).

    Attributes:
        base: Delay before the first retry in seconds (default: 1.0)
        max_delay: Optional cap in seconds
    """

    base: float = 1.0
    max_delay: float | None = None

    def delay(self, attempt: int) -> float:
        if attempt <= 0 or self.base == 0:
            return 0.0
        try:
            d = self.base * 2 ** (attempt - 1)
        except OverflowError:  # past ~attempt 1025 the product exceeds a float
            d = math.inf
        return _capped(d, self.max_delay)


def _capped(d: float, cap: float | None) -> float:
    return min(d, threading.TIMEOUT_MAX if cap is None else cap)


def backoff_for(strategy: Strategy | str, base_delay: float, max_delay: float | None = None) -> Backoff:
    """Build the Backoff implementation for a strategy."""
    match Strategy.parse(strategy):
        case Strategy.LINEAR:
            return LinearBackoff(base=base_delay, max_delay=max_delay)
        case Strategy.EXPONENTIAL:
            return ExponentialBackoff(base=base_delay, max_delay=max_delay)
