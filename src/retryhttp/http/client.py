"""Retrying HTTP client over a synchronous transport.

Wraps any object with send(httpx.Request) -> httpx.Response (httpx.Client by
default) in a backoff loop. Status-code decisions belong to the classifier;
the client only sequences attempts, resets the body and watches the
cancellation token.

Example:
    >>> client = RetryableClient(config=RetryConfig(attempts=5, base_delay=0.5))
    >>> result = client.get("https://api.example.com/health")
    >>> if result.is_ok():
    ...     print(result.unwrap().status_code)
    ... else:
    ...     print(result.unwrap_err())
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from retryhttp.foundation.errors import Err, Ok, Result, RetryError
from retryhttp.retry import BackoffScheduler, CancelToken, RetryConfig

from .base import ClientBase
from .builder import ClientBuilder
from .request import RequestDescriptor

if TYPE_CHECKING:
    from types import TracebackType

    from retryhttp.foundation.config import RetryHttpSettings
    from retryhttp.retry.scheduler import OnRetry, SleepFn

    from .policy import Classifier


@runtime_checkable
class Transport(Protocol):
    """Synchronous transport; must be safe for concurrent send() calls."""

    def send(self, request: httpx.Request) -> httpx.Response: ...


class RetryableClient(ClientBase):
    """HTTP client that retries requests per a classifier and backoff strategy.

    Args:
        transport: Object with send(request); default httpx.Client owned by this client
        config: Attempt budget, base delay and strategy
        classifier: Accept/retry decision (default: 2xx accepted)
        cancel: Externally owned cancellation token
        default_headers: Headers under every request (default: User-Agent)
        on_retry: Called as on_retry(next_attempt, error, delay)
        sleep: Wait between attempts (default: the cancel token's interruptible sleep)
        settings: Source for default config and transport
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        config: RetryConfig | None = None,
        classifier: Classifier | None = None,
        cancel: CancelToken | None = None,
        default_headers: Mapping[str, str] | None = None,
        on_retry: OnRetry | None = None,
        sleep: SleepFn | None = None,
        settings: RetryHttpSettings | None = None,
    ) -> None:
        super().__init__(
            config=config, classifier=classifier, cancel=cancel,
            default_headers=default_headers, on_retry=on_retry, settings=settings,
        )
        self._owns_transport = transport is None
        self._transport: Transport = transport if transport is not None else self._http_settings().build_client()
        self._scheduler = BackoffScheduler(
            self._config, sleep=sleep if sleep is not None else self._cancel.sleep, on_retry=on_retry,
        )

    @classmethod
    def builder(cls) -> ClientBuilder[RetryableClient]:
        """Fluent, validating construction."""
        return ClientBuilder(cls)

    @classmethod
    def from_settings(cls, settings: RetryHttpSettings | None = None, **kwargs: object) -> RetryableClient:
        """Client configured from environment settings (cached global by default)."""
        if settings is None:
            from retryhttp.foundation.config import get_settings
            settings = get_settings()
        return cls(settings=settings, **kwargs)  # type: ignore[arg-type]

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    def execute(self, descriptor: RequestDescriptor) -> Result[httpx.Response, RetryError]:
        """Send the request until it is accepted, the budget runs out, or the token fires.

        Returns:
            Ok(response) for the accepted attempt, otherwise Err with code
            INVALID_URL, CONTEXT_CLOSED, BACKOFF_EXHAUSTED (wrapping the last
            attempt's error) or an unrecoverable classifier rejection.
        """
        if (pre := self._preflight(descriptor)).is_err():
            return Err(pre.unwrap_err())

        accepted: list[httpx.Response | None] = []

        def attempt(index: int) -> Result[None, RetryError]:
            if self._cancel.cancelled:
                return self._closed(index)
            response: httpx.Response | None = None
            error: httpx.HTTPError | None = None
            try:
                response = self._transport.send(descriptor.to_request(self._default_headers))
            except httpx.HTTPError as exc:
                error = exc
            verdict = self._classify(descriptor, index, response, error)
            if verdict.is_ok():
                accepted.append(response)
            elif response is not None:
                response.close()
            return verdict

        outcome = self._scheduler.run(attempt)
        return Ok(accepted[-1]) if outcome.is_ok() else Err(outcome.unwrap_err())  # type: ignore[arg-type]

    def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | str | None = None,
        json_body: object | None = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[httpx.Response, RetryError]:
        return self.execute(RequestDescriptor.create(
            method, url, body=body, json_body=json_body, headers=headers, params=params,
        ))

    def get(
        self, url: str, headers: Mapping[str, str] | None = None, *, params: Mapping[str, str] | None = None,
    ) -> Result[httpx.Response, RetryError]:
        """GET with an empty body."""
        return self.request("GET", url, headers=headers, params=params)

    def post(
        self,
        url: str,
        body: bytes | str | None = None,
        headers: Mapping[str, str] | None = None,
        *,
        json_body: object | None = None,
    ) -> Result[httpx.Response, RetryError]:
        """POST; the body is re-sent unchanged on every attempt."""
        return self.request("POST", url, body=body, json_body=json_body, headers=headers)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, httpx.Client):
            self._transport.close()

    def __enter__(self) -> RetryableClient:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None,
    ) -> None:
        self.close()
