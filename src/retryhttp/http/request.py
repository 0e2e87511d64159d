"""Request descriptor: one logical request, re-sendable on every attempt.

The body is held as bytes and every call to to_request() builds a fresh
httpx.Request over the same buffer, so a retry never sends a drained stream.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

import httpx
import orjson

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

_EMPTY: Mapping[str, str] = {}


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Method, URL, body and headers for a retryable request.

    Attributes:
        method: HTTP method (normalized to uppercase)
        url: Absolute http(s) URL; validated by the client, not here
        body: Request payload; str is UTF-8 encoded
        headers: Header mapping copied onto each attempt
        params: Query parameters
    """

    method: str
    url: str
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.strip().upper())
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))
        elif not isinstance(self.body, bytes):
            object.__setattr__(self, "body", bytes(self.body or b""))
        object.__setattr__(self, "headers", dict(self.headers or _EMPTY))
        object.__setattr__(self, "params", dict(self.params or _EMPTY))

    @classmethod
    def create(
        cls,
        method: str,
        url: str,
        *,
        body: bytes | str | None = None,
        json_body: object | None = None,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> RequestDescriptor:
        """Build a descriptor; json_body is serialized with orjson.

        Raises:
            ValueError: If both body and json_body are given
        """
        if body is not None and json_body is not None:
            raise ValueError("Cannot specify both 'body' and 'json_body'")
        hdrs = dict(headers or _EMPTY)
        if json_body is not None:
            body = orjson.dumps(json_body)
            if not any(k.lower() == "content-type" for k in hdrs):
                hdrs["Content-Type"] = "application/json"
        return cls(method, url, body or b"", hdrs, dict(params or _EMPTY))

    def to_request(self, default_headers: Mapping[str, str] | None = None) -> httpx.Request:
        """Build a fresh wire request; descriptor headers override defaults."""
        headers = httpx.Headers(default_headers or _EMPTY)
        headers.update(self.headers)
        return httpx.Request(
            self.method,
            self.url,
            params=self.params or None,
            headers=headers,
            content=self.body or None,
        )
