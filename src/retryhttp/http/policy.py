"""Outcome classifiers deciding whether an attempt is accepted or retried.

A classifier receives exactly what the transport produced (a response, or
the httpx error it raised) and returns Ok(None) to accept or Err(RetryError)
to reject. Rejections marked unrecoverable stop the retry loop at once.

Example:
    >>> def only_json(response, error):
    ...     if error is not None:
    ...         return Err(transport_failure(error))
    ...     if response.headers.get("content-type", "").startswith("application/json"):
    ...         return Ok(None)
    ...     return Err(unacceptable_response(response.status_code, recoverable=False))
    >>> client = RetryableClient(classifier=only_json)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from retryhttp.foundation.errors import Err, Ok, Result, RetryError, transport_failure, unacceptable_response

if TYPE_CHECKING:
    import httpx

# Statuses worth another attempt: timeouts, rate limits, transient server errors
DEFAULT_RETRY_STATUSES: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})
SUCCESS_STATUSES: frozenset[int] = frozenset(range(200, 300))


@runtime_checkable
class Classifier(Protocol):
    """Maps one attempt's outcome to accept (Ok) or reject (Err)."""

    def __call__(
        self, response: httpx.Response | None, error: httpx.HTTPError | None, /,
    ) -> Result[None, RetryError]: ...


def default_policy(response: httpx.Response | None, error: httpx.HTTPError | None) -> Result[None, RetryError]:
    """Accept 2xx; retry every transport error and every other status."""
    if error is not None:
        return Err(transport_failure(error))
    if response is None:
        return Err(transport_failure(RuntimeError("transport returned no response")))
    if 200 <= response.status_code <= 299:
        return Ok(None)
    return Err(unacceptable_response(response.status_code))


def status_policy(
    retry_on: Iterable[int] = DEFAULT_RETRY_STATUSES,
    *,
    accept: Iterable[int] = SUCCESS_STATUSES,
    retry_transport_errors: bool = True,
) -> Classifier:
    """Build a classifier that retries only selected statuses.

    Args:
        retry_on: Statuses rejected as retryable
        accept: Statuses accepted (default: 2xx)
        retry_transport_errors: Whether transport errors are retryable

    Any status in neither set is rejected as unrecoverable, ending the loop.
    """
    retryable, accepted = frozenset(retry_on), frozenset(accept)
    if overlap := retryable & accepted:
        raise ValueError(f"Statuses cannot be both accepted and retried: {sorted(overlap)}")

    def classify(response: httpx.Response | None, error: httpx.HTTPError | None) -> Result[None, RetryError]:
        if error is not None:
            failure = transport_failure(error)
            return Err(failure if retry_transport_errors else failure.as_unrecoverable())
        if response is None:
            return Err(transport_failure(RuntimeError("transport returned no response")))
        code = response.status_code
        if code in accepted:
            return Ok(None)
        return Err(unacceptable_response(code, recoverable=code in retryable))

    return classify
