"""Environment-based configuration using pydantic-settings.

Provides validated defaults for the retry loop, the default httpx transport
and logging. Supports .env files and nested configuration.

Example:
    >>> from retryhttp.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.attempts
    10

    # Or with environment variables:
    # RETRYHTTP_RETRY_ATTEMPTS=5
    # RETRYHTTP_RETRY_STRATEGY=Exponential
    # RETRYHTTP_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from retryhttp.retry.backoff import Strategy
from retryhttp.retry.config import DEFAULT_ATTEMPTS, DEFAULT_DELAY, MAX_ATTEMPTS

if TYPE_CHECKING:
    import httpx


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYHTTP_RETRY_",
        extra="ignore",
    )

    attempts: Annotated[int, Field(ge=1, le=MAX_ATTEMPTS)] = DEFAULT_ATTEMPTS
    base_delay: NonNegativeFloat = Field(default=DEFAULT_DELAY, description="Base delay in seconds")
    strategy: Strategy = Strategy.LINEAR
    max_delay: NonNegativeFloat | None = Field(default=None, description="Cap on a single wait")

    @field_validator("strategy", mode="before")
    @classmethod
    def _parse_strategy(cls, v: object) -> Strategy:
        return Strategy.parse(v)  # type: ignore[arg-type]


class HttpSettings(BaseSettings):
    """Default httpx transport configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYHTTP_HTTP_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = "retryhttp/1.0"

    @property
    def default_headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}

    def build_client(self) -> httpx.Client:
        import httpx
        return httpx.Client(
            timeout=self.timeout,
            verify=self.verify_ssl,
            follow_redirects=self.follow_redirects,
        )

    def build_async_client(self) -> httpx.AsyncClient:
        import httpx
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_ssl,
            follow_redirects=self.follow_redirects,
        )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYHTTP_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text", "none"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v


class RetryHttpSettings(BaseSettings):
    """Root settings for retryhttp.

    Loads configuration from environment variables with RETRYHTTP_ prefix.

    Example environment variables:
        RETRYHTTP_RETRY_ATTEMPTS=5
        RETRYHTTP_RETRY_BASE_DELAY=0.5
        RETRYHTTP_HTTP_TIMEOUT=10
        RETRYHTTP_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYHTTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetryHttpSettings:
    """Get the global settings instance (cached)."""
    return RetryHttpSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
