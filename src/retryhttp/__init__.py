"""retryhttp - retrying HTTP request execution over httpx.

Wraps an httpx transport in a backoff loop driven by a pluggable classifier.

Example:
    >>> from retryhttp import RetryableClient, RetryConfig, Strategy
    >>>
    >>> client = RetryableClient(config=RetryConfig(attempts=5, base_delay=0.5, strategy=Strategy.EXPONENTIAL))
    >>> result = client.post("https://api.example.com/orders", json_body={"sku": "A-1"})
    >>> response = result.unwrap_or_raise()

Failures come back as Err(RetryError) with an ErrorCode:
    INVALID_CONFIGURATION, INVALID_URL, CONTEXT_CLOSED,
    TRANSPORT_FAILURE, UNACCEPTABLE_RESPONSE, BACKOFF_EXHAUSTED
"""

from .foundation.config import (
    HttpSettings,
    LoggingSettings,
    RetryHttpSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from .foundation.errors import (
    Err,
    ErrorCode,
    InvalidConfigurationError,
    Ok,
    Result,
    RetryError,
    RetryException,
)
from .http import (
    DEFAULT_RETRY_STATUSES,
    AsyncRetryableClient,
    AsyncTransport,
    Classifier,
    ClientBuilder,
    RequestDescriptor,
    RetryableClient,
    Transport,
    default_policy,
    is_valid_absolute_http_url,
    status_policy,
)
from .observability import configure_logging, configure_logging_from_settings
from .retry import (
    Backoff,
    BackoffScheduler,
    CancelToken,
    ExponentialBackoff,
    LinearBackoff,
    RetryConfig,
    Strategy,
    arun_with_backoff,
    run_with_backoff,
)

__version__ = "0.1.0"

__all__ = [
    # Clients
    "RetryableClient", "AsyncRetryableClient", "ClientBuilder", "Transport", "AsyncTransport",
    "RequestDescriptor", "is_valid_absolute_http_url",
    # Classifiers
    "Classifier", "default_policy", "status_policy", "DEFAULT_RETRY_STATUSES",
    # Retry
    "RetryConfig", "Strategy", "Backoff", "LinearBackoff", "ExponentialBackoff",
    "BackoffScheduler", "run_with_backoff", "arun_with_backoff", "CancelToken",
    # Errors
    "ErrorCode", "RetryError", "RetryException", "InvalidConfigurationError", "Result", "Ok", "Err",
    # Settings
    "RetryHttpSettings", "RetrySettings", "HttpSettings", "LoggingSettings",
    "get_settings", "clear_settings_cache",
    # Logging
    "configure_logging", "configure_logging_from_settings",
]
