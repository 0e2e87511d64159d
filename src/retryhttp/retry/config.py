"""Immutable retry configuration.

RetryConfig is validated once at construction and owned by a client for its
whole lifetime. Validation failures surface as InvalidConfigurationError.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, ValidationError, field_validator

from retryhttp.foundation.errors import InvalidConfigurationError

from .backoff import Backoff, Strategy, backoff_for

if TYPE_CHECKING:
    from retryhttp.foundation.config import RetrySettings

DEFAULT_ATTEMPTS = 10
DEFAULT_DELAY = 1.0
MAX_ATTEMPTS = 100_000


class RetryConfig(BaseModel):
    """Attempt budget, base delay and strategy for one client.

    Attributes:
        attempts: Upper bound on tries, 1..100000 (default: 10)
        base_delay: Base delay in seconds; timedelta accepted (default: 1.0)
        strategy: Linear (constant) or Exponential (doubling)
        max_delay: Optional cap on any single wait

    Example:
        >>> cfg = RetryConfig(attempts=3, base_delay=0.5, strategy="Exponential")
        >>> [cfg.delay(i) for i in range(3)]
        [0.0, 0.5, 1.0]
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Configuration",
            "examples": [{"attempts": 5, "base_delay": 1.0, "strategy": "Linear"}],
        },
    )

    attempts: Annotated[int, Field(ge=1, le=MAX_ATTEMPTS)] = DEFAULT_ATTEMPTS
    base_delay: NonNegativeFloat = DEFAULT_DELAY
    strategy: Strategy = Strategy.LINEAR
    max_delay: NonNegativeFloat | None = None

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise _invalid(e) from e

    @classmethod
    def model_validate(cls, obj: Any, *args: Any, **kwargs: Any) -> RetryConfig:
        """Validate a mapping, raising InvalidConfigurationError like the constructor."""
        try:
            return super().model_validate(obj, *args, **kwargs)
        except ValidationError as e:
            raise _invalid(e) from e

    @field_validator("base_delay", "max_delay", mode="before")
    @classmethod
    def _seconds(cls, v: object) -> object:
        """Accept timedelta durations."""
        return v.total_seconds() if isinstance(v, timedelta) else v

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, v: object) -> Strategy:
        return Strategy.parse(v)  # type: ignore[arg-type]

    @property
    def backoff(self) -> Backoff:
        return backoff_for(self.strategy, self.base_delay, self.max_delay)

    def delay(self, attempt: int) -> float:
        """Wait in seconds before the given 0-indexed attempt."""
        return self.backoff.delay(attempt)

    def with_changes(self, **changes: Any) -> RetryConfig:
        """Return a validated copy with fields replaced."""
        return RetryConfig(**{**self.model_dump(), **changes})

    @classmethod
    def from_settings(cls, settings: RetrySettings | None = None) -> RetryConfig:
        """Build from environment-backed settings (cached global by default)."""
        if settings is None:
            from retryhttp.foundation.config import get_settings
            settings = get_settings().retry
        return cls(
            attempts=settings.attempts,
            base_delay=settings.base_delay,
            strategy=settings.strategy,
            max_delay=settings.max_delay,
        )


def _invalid(e: ValidationError) -> InvalidConfigurationError:
    reasons = "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}" for err in e.errors()
    )
    return InvalidConfigurationError.from_message(f"invalid retry configuration: {reasons}", details=str(e))
