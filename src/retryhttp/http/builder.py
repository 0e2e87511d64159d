"""Fluent client construction with fail-fast validation.

Each with_* call validates its option immediately and returns a new builder,
raising InvalidConfigurationError on the first bad value.

Example:
    >>> client = (
    ...     RetryableClient.builder()
    ...     .with_attempts(5)
    ...     .with_delay(timedelta(milliseconds=250))
    ...     .with_strategy("Exponential")
    ...     .with_policy(status_policy())
    ...     .build()
    ... )
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from retryhttp.foundation.errors import InvalidConfigurationError
from retryhttp.retry import CancelToken, RetryConfig, Strategy

if TYPE_CHECKING:
    from retryhttp.retry.scheduler import OnRetry

    from .policy import Classifier

C = TypeVar("C")


class ClientBuilder(Generic[C]):
    """Immutable builder accumulating validated client options."""

    __slots__ = ("_client_cls", "_config", "_options")

    def __init__(self, client_cls: type[C], config: RetryConfig | None = None, options: Mapping[str, Any] | None = None) -> None:
        self._client_cls = client_cls
        self._config = config or RetryConfig()
        self._options: dict[str, Any] = dict(options or {})

    def _with(self, *, config: RetryConfig | None = None, **options: Any) -> ClientBuilder[C]:
        return ClientBuilder(self._client_cls, config or self._config, {**self._options, **options})

    @property
    def config(self) -> RetryConfig:
        return self._config

    def with_transport(self, transport: object) -> ClientBuilder[C]:
        if not callable(getattr(transport, "send", None)):
            raise InvalidConfigurationError.from_message(
                f"transport {type(transport).__name__} has no callable send()",
            )
        return self._with(transport=transport)

    def with_attempts(self, attempts: int) -> ClientBuilder[C]:
        return self._with(config=self._config.with_changes(attempts=attempts))

    def with_delay(self, delay: float | timedelta) -> ClientBuilder[C]:
        return self._with(config=self._config.with_changes(base_delay=delay))

    def with_max_delay(self, max_delay: float | timedelta | None) -> ClientBuilder[C]:
        return self._with(config=self._config.with_changes(max_delay=max_delay))

    def with_strategy(self, strategy: Strategy | str) -> ClientBuilder[C]:
        return self._with(config=self._config.with_changes(strategy=Strategy.parse(strategy)))

    def with_policy(self, classifier: Classifier) -> ClientBuilder[C]:
        if not callable(classifier):
            raise InvalidConfigurationError.from_message("policy must be callable")
        return self._with(classifier=classifier)

    def with_cancel_token(self, cancel: CancelToken) -> ClientBuilder[C]:
        if not isinstance(cancel, CancelToken):
            raise InvalidConfigurationError.from_message(
                f"expected CancelToken, got {type(cancel).__name__}",
            )
        return self._with(cancel=cancel)

    def with_default_headers(self, headers: Mapping[str, str]) -> ClientBuilder[C]:
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in headers.items()):
            raise InvalidConfigurationError.from_message("default headers must map str to str")
        return self._with(default_headers=dict(headers))

    def with_on_retry(self, on_retry: OnRetry) -> ClientBuilder[C]:
        if not callable(on_retry):
            raise InvalidConfigurationError.from_message("on_retry must be callable")
        return self._with(on_retry=on_retry)

    def build(self) -> C:
        return self._client_cls(config=self._config, **self._options)

    def __repr__(self) -> str:
        return f"ClientBuilder({self._client_cls.__name__}, {self._config!r}, options={sorted(self._options)})"
