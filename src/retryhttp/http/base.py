"""Shared configuration and per-attempt logic for the sync and async clients."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from retryhttp.foundation.errors import Err, Ok, Result, RetryError, context_closed, invalid_url
from retryhttp.retry import CancelToken, RetryConfig

from .policy import Classifier, default_policy
from .validation import url_error

if TYPE_CHECKING:
    import httpx

    from retryhttp.foundation.config import HttpSettings, RetryHttpSettings
    from retryhttp.retry.scheduler import OnRetry

    from .request import RequestDescriptor

logger = logging.getLogger("retryhttp.http")


class ClientBase:
    """Immutable wiring shared by RetryableClient and AsyncRetryableClient.

    Per-call state lives inside execute(), so instances are safe to share
    across threads/tasks when the transport is.
    """

    def __init__(
        self,
        *,
        config: RetryConfig | None = None,
        classifier: Classifier | None = None,
        cancel: CancelToken | None = None,
        default_headers: Mapping[str, str] | None = None,
        on_retry: OnRetry | None = None,
        settings: RetryHttpSettings | None = None,
    ) -> None:
        self._settings = settings
        self._config = config or (RetryConfig.from_settings(settings.retry) if settings else RetryConfig())
        self._classifier: Classifier = classifier or default_policy
        self._cancel = cancel or CancelToken()
        self._default_headers = dict(
            default_headers if default_headers is not None else self._http_settings().default_headers
        )
        self._on_retry = on_retry

    @property
    def config(self) -> RetryConfig:
        return self._config

    @property
    def classifier(self) -> Classifier:
        return self._classifier

    @property
    def cancel_token(self) -> CancelToken:
        return self._cancel

    def _http_settings(self) -> HttpSettings:
        if self._settings is not None:
            return self._settings.http
        from retryhttp.foundation.config import HttpSettings
        return HttpSettings()

    def _preflight(self, descriptor: RequestDescriptor) -> Result[None, RetryError]:
        """Checks made once per call, before any attempt is consumed."""
        if (reason := url_error(descriptor.url)) is not None:
            logger.debug(f"Rejected {descriptor.method} {descriptor.url!r}: {reason}")
            return Err(invalid_url(descriptor.url, reason))
        if self._cancel.cancelled:
            return Err(context_closed(self._cancel.reason))
        return Ok(None)

    def _closed(self, attempt: int) -> Result[None, RetryError]:
        logger.debug(f"Attempt {attempt + 1} skipped: {self._cancel.reason}")
        return Err(context_closed(self._cancel.reason).at_attempt(attempt))

    def _classify(
        self,
        descriptor: RequestDescriptor,
        attempt: int,
        response: httpx.Response | None,
        error: httpx.HTTPError | None,
    ) -> Result[None, RetryError]:
        """Hand the outcome verbatim to the classifier and stamp the attempt."""
        outcome = f"status {response.status_code}" if response is not None else f"{type(error).__name__}: {error}"
        logger.debug(f"{descriptor.method} {descriptor.url} attempt {attempt + 1}/{self._config.attempts} -> {outcome}")
        verdict = self._classifier(response, error)
        return verdict if verdict.is_ok() else Err(verdict.unwrap_err().at_attempt(attempt))

    def __repr__(self) -> str:
        cfg = self._config
        return (
            f"{type(self).__name__}(attempts={cfg.attempts}, base_delay={cfg.base_delay}, "
            f"strategy={cfg.strategy.value})"
        )
