"""Error handling for retryhttp.

- ErrorCode: failure taxonomy
- RetryError/RetryException: structured errors and their raisable wrapper
- Result/Ok/Err: typed success/failure returns
"""

from .errors import (
    ErrorCode,
    InvalidConfigurationError,
    RetryError,
    RetryException,
    backoff_exhausted,
    context_closed,
    invalid_configuration,
    invalid_url,
    transport_failure,
    unacceptable_response,
)
from .result import Err, Ok, Result

__all__ = [
    "ErrorCode", "RetryError", "RetryException", "InvalidConfigurationError",
    "Result", "Ok", "Err",
    "invalid_configuration", "invalid_url", "context_closed",
    "transport_failure", "unacceptable_response", "backoff_exhausted",
]
