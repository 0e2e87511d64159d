"""URL validation for request targets."""

from __future__ import annotations

from pydantic import HttpUrl, TypeAdapter, ValidationError

# TypeAdapter for fast str -> HttpUrl validation (http/https scheme, host required)
_HttpUrlAdapter: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


def url_error(url: object) -> str | None:
    """Return why `url` is not an absolute http(s) URL, or None if it is."""
    if not isinstance(url, str) or not url.strip():
        return "url is required"
    if url != url.strip() or any(c.isspace() for c in url):
        return "url must not contain whitespace"
    try:
        _HttpUrlAdapter.validate_python(url)
    except ValidationError as e:
        return "; ".join(err["msg"] for err in e.errors())
    return None


def is_valid_absolute_http_url(url: object) -> bool:
    """Whether `url` is a syntactically valid absolute http:// or https:// URL."""
    return url_error(url) is None
