"""Shared fixtures: scripted httpx transports and recorded sleeps."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import httpx
import pytest

from retryhttp.foundation.config import clear_settings_cache

URL = "https://api.example.com/items"


class ScriptedHandler:
    """MockTransport handler replaying a script of statuses or exceptions.

    Each entry is an int status or an exception class to raise; the last
    entry repeats once the script runs out. Every request is recorded.
    """

    def __init__(self, script: Iterable[int | type[httpx.HTTPError]]) -> None:
        self.script = list(script)
        self.requests: list[httpx.Request] = []
        self.bodies: list[bytes] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        step = self.script[min(len(self.requests), len(self.script) - 1)]
        self.requests.append(request)
        self.bodies.append(request.read())
        if isinstance(step, type):
            raise step("scripted failure", request=request)
        return httpx.Response(step, json={"attempt": len(self.requests)})


class Sleeps(list):
    """Recording sleep: append the delay instead of waiting."""

    def __call__(self, seconds: float) -> None:
        self.append(seconds)


class AsyncSleeps(list):
    async def __call__(self, seconds: float) -> None:
        self.append(seconds)


@pytest.fixture
def sleeps() -> Sleeps:
    return Sleeps()


@pytest.fixture
def async_sleeps() -> AsyncSleeps:
    return AsyncSleeps()


@pytest.fixture
def scripted() -> Callable[..., tuple[ScriptedHandler, httpx.Client]]:
    """Factory: scripted(200) or scripted(500, 500, 200) -> (handler, httpx.Client)."""
    clients: list[httpx.Client] = []

    def make(*script: int | type[httpx.HTTPError]) -> tuple[ScriptedHandler, httpx.Client]:
        handler = ScriptedHandler(script)
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return handler, client

    yield make
    for c in clients:
        c.close()


@pytest.fixture(autouse=True)
def fresh_settings() -> object:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
