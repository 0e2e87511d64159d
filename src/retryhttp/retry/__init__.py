"""Retry orchestration: strategies, configuration, cancellation and the attempt loop.

Example:
    >>> from retryhttp.retry import BackoffScheduler, RetryConfig
    >>> scheduler = BackoffScheduler(RetryConfig(attempts=3, base_delay=0.2, strategy="Exponential"))
    >>> result = scheduler.run(lambda attempt: try_once(attempt))
"""

from .backoff import Backoff, ExponentialBackoff, LinearBackoff, Strategy, backoff_for
from .cancel import CancelToken
from .config import DEFAULT_ATTEMPTS, DEFAULT_DELAY, MAX_ATTEMPTS, RetryConfig
from .scheduler import BackoffScheduler, arun_with_backoff, run_with_backoff

__all__ = [
    # Strategies
    "Strategy", "Backoff", "LinearBackoff", "ExponentialBackoff", "backoff_for",
    # Configuration
    "RetryConfig", "DEFAULT_ATTEMPTS", "DEFAULT_DELAY", "MAX_ATTEMPTS",
    # Cancellation
    "CancelToken",
    # Execution
    "BackoffScheduler", "run_with_backoff", "arun_with_backoff",
]
