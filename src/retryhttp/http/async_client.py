"""Retrying HTTP client over an asynchronous transport.

Same semantics as RetryableClient; attempts are awaited one after another on
the calling task and the inter-attempt wait is the cancel token's asleep().
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
    from retryhttp.retry.scheduler import AsyncSleepFn, OnRetry

    from .policy import Classifier


@runtime_checkable
class AsyncTransport(Protocol):
    """Asynchronous transport such as httpx.AsyncClient."""

    async def send(self, request: httpx.Request) -> httpx.Response: ...


class AsyncRetryableClient(ClientBase):
    """Async HTTP client that retries requests per a classifier and backoff strategy.

    Example:
        >>> async with AsyncRetryableClient(config=RetryConfig(attempts=3)) as client:
        ...     result = await client.post("https://api.example.com/items", json_body={"a": 1})
    """

    def __init__(
        self,
        transport: AsyncTransport | None = None,
        *,
        config: RetryConfig | None = None,
        classifier: Classifier | None = None,
        cancel: CancelToken | None = None,
        default_headers: Mapping[str, str] | None = None,
        on_retry: OnRetry | None = None,
        sleep: AsyncSleepFn | None = None,
        settings: RetryHttpSettings | None = None,
    ) -> None:
        super().__init__(
            config=config, classifier=classifier, cancel=cancel,
            default_headers=default_headers, on_retry=on_retry, settings=settings,
        )
        self._owns_transport = transport is None
        self._transport: AsyncTransport = (
            transport if transport is not None else self._http_settings().build_async_client()
        )
        self._scheduler = BackoffScheduler(
            self._config, asleep=sleep if sleep is not None else self._cancel.asleep, on_retry=on_retry,
        )

    @classmethod
    def builder(cls) -> ClientBuilder[AsyncRetryableClient]:
        return ClientBuilder(cls)

    @classmethod
    def from_settings(cls, settings: RetryHttpSettings | None = None, **kwargs: object) -> AsyncRetryableClient:
        if settings is None:
            from retryhttp.foundation.config import get_settings
            settings = get_settings()
        return cls(settings=settings, **kwargs)  # type: ignore[arg-type]

    async def execute(self, descriptor: RequestDescriptor) -> Result[httpx.Response, RetryError]:
        """Async twin of RetryableClient.execute()."""
        if (pre := self._preflight(descriptor)).is_err():
            return Err(pre.unwrap_err())

        accepted: list[httpx.Response | None] = []

        async def attempt(index: int) -> Result[None, RetryError]:
            if self._cancel.cancelled:
                return self._closed(index)
            response: httpx.Response | None = None
            error: httpx.HTTPError | None = None
            try:
                response = await self._transport.send(descriptor.to_request(self._default_headers))
            except httpx.HTTPError as exc:
                error = exc
            verdict = self._classify(descriptor, index, response, error)
            if verdict.is_ok():
                accepted.append(response)
            elif response is not None:
                await response.aclose()
            return verdict

        outcome = await self._scheduler.arun(attempt)
        return Ok(accepted[-1]) if outcome.is_ok() else Err(outcome.unwrap_err())  # type: ignore[arg-type]

    async def request(
        self,
        method: str,
        url: str,
        *,
        body: bytes | str | None = None,
        json_body: object | None = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Result[httpx.Response, RetryError]:
        return await self.execute(RequestDescriptor.create(
            method, url, body=body, json_body=json_body, headers=headers, params=params,
        ))

    async def get(
        self, url: str, headers: Mapping[str, str] | None = None, *, params: Mapping[str, str] | None = None,
    ) -> Result[httpx.Response, RetryError]:
        return await self.request("GET", url, headers=headers, params=params)

    async def post(
        self,
        url: str,
        body: bytes | str | None = None,
        headers: Mapping[str, str] | None = None,
        *,
        json_body: object | None = None,
    ) -> Result[httpx.Response, RetryError]:
        return await self.request("POST", url, body=body, json_body=json_body, headers=headers)

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, httpx.AsyncClient):
            await self._transport.aclose()

    async def __aenter__(self) -> AsyncRetryableClient:
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None,
    ) -> None:
        await self.aclose()
