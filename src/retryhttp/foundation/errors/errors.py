"""Error codes and structured errors for retrying HTTP execution.

Every expected failure is described by a RetryError and travels inside
Err(...). RetryException wraps one for callers that prefer raising.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ErrorCode(StrEnum):
    """Machine-readable failure classification."""
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    INVALID_URL = "INVALID_URL"
    CONTEXT_CLOSED = "CONTEXT_CLOSED"
    TRANSPORT_FAILURE = "TRANSPORT_FAILURE"
    UNACCEPTABLE_RESPONSE = "UNACCEPTABLE_RESPONSE"
    BACKOFF_EXHAUSTED = "BACKOFF_EXHAUSTED"


# Per-attempt failures that feed the retry decision
_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.TRANSPORT_FAILURE,
    ErrorCode.UNACCEPTABLE_RESPONSE,
})


class RetryError(BaseModel):
    """Structured failure produced by the scheduler, classifier or client.

    Attributes:
        code: Error classification
        message: Human-readable message
        recoverable: Whether another attempt may succeed
        attempt: 0-indexed attempt that produced the error, if any
        status_code: HTTP status of the rejected response, if any
        cause: Wrapped error (set on BACKOFF_EXHAUSTED)
        details: Extra diagnostic text (exception type, URL, ...)
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Error",
            "examples": [{
                "code": "UNACCEPTABLE_RESPONSE",
                "message": "HTTP response status code (503) outside boundaries",
                "recoverable": True,
                "attempt": 2,
                "status_code": 503,
            }],
        },
    )

    code: ErrorCode
    message: Annotated[str, Field(min_length=1)]
    recoverable: bool = False
    attempt: Annotated[int, Field(ge=0)] | None = None
    status_code: Annotated[int, Field(ge=0)] | None = None
    cause: RetryError | None = Field(default=None, repr=False)
    details: str | None = Field(default=None, repr=False)

    @computed_field
    @property
    def is_retryable(self) -> bool:
        """Whether the scheduler should keep going after this error."""
        return self.recoverable and self.code in _RETRYABLE_CODES

    @property
    def root_cause(self) -> RetryError:
        """Innermost error of the cause chain."""
        err = self
        while err.cause is not None:
            err = err.cause
        return err

    @classmethod
    def create(
        cls,
        code: ErrorCode,
        message: str,
        *,
        recoverable: bool | None = None,
        status_code: int | None = None,
        cause: RetryError | None = None,
        details: str | None = None,
    ) -> Self:
        """Factory; recoverability defaults from the code."""
        return cls(
            code=code,
            message=message,
            recoverable=code in _RETRYABLE_CODES if recoverable is None else recoverable,
            status_code=status_code,
            cause=cause,
            details=details,
        )

    def at_attempt(self, attempt: int) -> RetryError:
        """Return a copy stamped with the attempt index."""
        return self.model_copy(update={"attempt": attempt})

    def as_unrecoverable(self) -> RetryError:
        """Return a copy that stops the retry loop."""
        return self.model_copy(update={"recoverable": False})

    def render(self) -> str:
        parts = [f"{self.message} [{self.code}]"]
        if self.attempt is not None:
            parts.append(f" (attempt {self.attempt})")
        if self.cause is not None:
            parts.append(f": {self.cause.render()}")
        return "".join(parts)

    __str__ = render


RetryError.model_rebuild()


class RetryException(Exception):
    """Exception wrapping a RetryError for raising."""

    def __init__(self, error: RetryError) -> None:
        self.error = error
        super().__init__(error.render())

    @property
    def code(self) -> ErrorCode:
        return self.error.code


class InvalidConfigurationError(RetryException, ValueError):
    """Raised when a client, builder or config receives an invalid option."""

    @classmethod
    def from_message(cls, message: str, *, details: str | None = None) -> Self:
        return cls(invalid_configuration(message, details=details))


# ─────────────────────────────────────────────────────────────────────────────
# Constructors for each failure kind
# ─────────────────────────────────────────────────────────────────────────────


def invalid_configuration(message: str, *, details: str | None = None) -> RetryError:
    return RetryError.create(ErrorCode.INVALID_CONFIGURATION, message, details=details)


def invalid_url(url: str, reason: str = "") -> RetryError:
    msg = f"url validation failed for {url!r}" + (f": {reason}" if reason else "")
    return RetryError.create(ErrorCode.INVALID_URL, msg, details=url)


def context_closed(reason: str | None = None) -> RetryError:
    return RetryError.create(ErrorCode.CONTEXT_CLOSED, f"context closed: {reason or 'cancelled'}")


def transport_failure(exc: BaseException) -> RetryError:
    return RetryError.create(
        ErrorCode.TRANSPORT_FAILURE,
        f"propagating error: {str(exc) or type(exc).__name__}",
        details=type(exc).__name__,
    )


def unacceptable_response(status_code: int, *, recoverable: bool = True) -> RetryError:
    return RetryError.create(
        ErrorCode.UNACCEPTABLE_RESPONSE,
        f"HTTP response status code ({status_code}) outside boundaries",
        recoverable=recoverable,
        status_code=status_code,
    )


def backoff_exhausted(last: RetryError, attempts: int) -> RetryError:
    return RetryError.create(
        ErrorCode.BACKOFF_EXHAUSTED,
        f"backoff policy exhausted after {attempts} attempt(s)",
        status_code=last.status_code,
        cause=last,
    )
