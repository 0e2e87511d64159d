"""Tests for AsyncRetryableClient over scripted httpx transports."""

from __future__ import annotations

import asyncio
import time

import httpx
import pytest

from retryhttp.foundation.errors import ErrorCode
from retryhttp.http import AsyncRetryableClient, status_policy
from retryhttp.retry import CancelToken, RetryConfig

from conftest import URL, ScriptedHandler


def make_client(handler: ScriptedHandler, sleeps: list[float] | None = None, **kwargs: object) -> AsyncRetryableClient:
    kwargs.setdefault("config", RetryConfig(attempts=5, base_delay=0.01))
    kwargs.setdefault("default_headers", {})
    transport = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AsyncRetryableClient(transport, sleep=sleeps, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_retries_until_success(async_sleeps: list[float]) -> None:
    handler = ScriptedHandler([500, httpx.ConnectError, 200])
    response = (await make_client(handler, async_sleeps).get(URL)).unwrap()

    assert response.json() == {"attempt": 3}
    assert handler.calls == 3
    assert async_sleeps == [0.01, 0.01]


@pytest.mark.asyncio
async def test_body_is_resent_identically(async_sleeps: list[float]) -> None:
    handler = ScriptedHandler([503, 503, 200])
    result = await make_client(handler, async_sleeps).post(URL, b"payload")

    assert result.is_ok()
    assert handler.bodies == [b"payload"] * 3


@pytest.mark.asyncio
async def test_exhaustion(async_sleeps: list[float]) -> None:
    handler = ScriptedHandler([500])
    client = make_client(handler, async_sleeps, config=RetryConfig(attempts=4, base_delay=0.1, strategy="Exponential"))
    err = (await client.get(URL)).unwrap_err()

    assert err.code == ErrorCode.BACKOFF_EXHAUSTED
    assert err.status_code == 500
    assert handler.calls == 4
    assert async_sleeps == pytest.approx([0.1, 0.2, 0.4])


@pytest.mark.asyncio
async def test_invalid_url_and_cancelled_token_send_nothing() -> None:
    handler = ScriptedHandler([200])
    assert (await make_client(handler).get("not a url")).unwrap_err().code == ErrorCode.INVALID_URL

    token = CancelToken()
    token.cancel()
    assert (await make_client(handler, cancel=token).get(URL)).unwrap_err().code == ErrorCode.CONTEXT_CLOSED
    assert handler.calls == 0


@pytest.mark.asyncio
async def test_fatal_status_stops_immediately(async_sleeps: list[float]) -> None:
    handler = ScriptedHandler([401, 200])
    err = (await make_client(handler, async_sleeps, classifier=status_policy()).get(URL)).unwrap_err()

    assert err.status_code == 401
    assert handler.calls == 1
    assert async_sleeps == []


@pytest.mark.asyncio
async def test_cancel_wakes_pending_backoff() -> None:
    handler = ScriptedHandler([500])
    token = CancelToken()
    client = make_client(handler, config=RetryConfig(attempts=10, base_delay=5.0), cancel=token)
    asyncio.get_running_loop().call_later(0.05, token.cancel, "stop")

    start = time.monotonic()
    err = (await client.get(URL)).unwrap_err()

    assert err.code == ErrorCode.CONTEXT_CLOSED
    assert handler.calls == 1
    assert time.monotonic() - start < 4.0


@pytest.mark.asyncio
async def test_concurrent_calls_share_one_client(async_sleeps: list[float]) -> None:
    handler = ScriptedHandler([200])
    client = make_client(handler, async_sleeps)

    results = await asyncio.gather(*(client.get(f"{URL}/{i}") for i in range(5)))

    assert all(r.is_ok() for r in results)
    assert handler.calls == 5


@pytest.mark.asyncio
async def test_owned_transport_closed_by_context_manager() -> None:
    async with AsyncRetryableClient(default_headers={}) as client:
        owned = client._transport
        assert isinstance(owned, httpx.AsyncClient)
    assert owned.is_closed
