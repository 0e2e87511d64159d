"""Tests for backoff strategies and RetryConfig validation."""

from __future__ import annotations

import math
import threading
from datetime import timedelta

import pytest

from retryhttp.foundation.errors import ErrorCode, InvalidConfigurationError
from retryhttp.retry import (
    Backoff,
    ExponentialBackoff,
    LinearBackoff,
    RetryConfig,
    Strategy,
    backoff_for,
)


# ═════════════════════════════════════════════════════════════════════════════
# Strategy parsing
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("value", ["Linear", "linear", " LINEAR ", Strategy.LINEAR])
def test_strategy_parse_linear(value: object) -> None:
    assert Strategy.parse(value) is Strategy.LINEAR


def test_strategy_parse_exponential() -> None:
    assert Strategy.parse("Exponential") is Strategy.EXPONENTIAL


@pytest.mark.parametrize("value", ["Bogus", "", 3, None])
def test_strategy_parse_rejects_unknown(value: object) -> None:
    with pytest.raises(InvalidConfigurationError) as exc_info:
        Strategy.parse(value)  # type: ignore[arg-type]
    assert exc_info.value.code == ErrorCode.INVALID_CONFIGURATION
    assert isinstance(exc_info.value, ValueError)


# ═════════════════════════════════════════════════════════════════════════════
# Delay formulas
# ═════════════════════════════════════════════════════════════════════════════


def test_no_delay_before_first_attempt() -> None:
    assert LinearBackoff(base=2.0).delay(0) == 0.0
    assert ExponentialBackoff(base=2.0).delay(0) == 0.0


def test_linear_delay_is_constant() -> None:
    backoff = LinearBackoff(base=0.25)
    assert [backoff.delay(i) for i in range(1, 8)] == [0.25] * 7


def test_exponential_delay_doubles() -> None:
    backoff = ExponentialBackoff(base=0.1)
    for i in range(1, 12):
        assert backoff.delay(i) == pytest.approx(0.1 * 2 ** (i - 1))


def test_max_delay_caps_exponential_growth() -> None:
    backoff = ExponentialBackoff(base=1.0, max_delay=5.0)
    assert [backoff.delay(i) for i in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_zero_base_delay() -> None:
    assert ExponentialBackoff(base=0.0).delay(10) == 0.0


def test_backoff_for_builds_matching_strategy() -> None:
    assert isinstance(backoff_for("Linear", 1.0), LinearBackoff)
    assert isinstance(backoff_for(Strategy.EXPONENTIAL, 1.0), ExponentialBackoff)
    assert isinstance(backoff_for("Linear", 1.0), Backoff)


def test_backoff_for_rejects_unknown() -> None:
    with pytest.raises(InvalidConfigurationError):
        backoff_for("Fibonacci", 1.0)


# ═════════════════════════════════════════════════════════════════════════════
# RetryConfig
# ═════════════════════════════════════════════════════════════════════════════


def test_config_defaults() -> None:
    cfg = RetryConfig()
    assert (cfg.attempts, cfg.base_delay, cfg.strategy, cfg.max_delay) == (10, 1.0, Strategy.LINEAR, None)


def test_config_accepts_timedelta() -> None:
    cfg = RetryConfig(base_delay=timedelta(milliseconds=10), max_delay=timedelta(seconds=1))
    assert cfg.base_delay == pytest.approx(0.01)
    assert cfg.max_delay == 1.0


def test_config_delay_follows_strategy() -> None:
    cfg = RetryConfig(attempts=4, base_delay=0.5, strategy="Exponential")
    assert [cfg.delay(i) for i in range(4)] == [0.0, 0.5, 1.0, 2.0]


@pytest.mark.parametrize("changes", [
    {"strategy": "Bogus"},
    {"attempts": 0},
    {"attempts": -1},
    {"attempts": 100_001},
    {"base_delay": -0.1},
    {"max_delay": -1},
    {"unknown": 1},
])
def test_config_rejects_invalid_values(changes: dict[str, object]) -> None:
    with pytest.raises(InvalidConfigurationError) as exc_info:
        RetryConfig(**changes)
    assert exc_info.value.error.code == ErrorCode.INVALID_CONFIGURATION
    assert not exc_info.value.error.recoverable


def test_config_is_immutable() -> None:
    cfg = RetryConfig()
    with pytest.raises(Exception):
        cfg.attempts = 3  # type: ignore[misc]


def test_config_with_changes_validates() -> None:
    cfg = RetryConfig(attempts=3)
    assert cfg.with_changes(strategy="Exponential").strategy is Strategy.EXPONENTIAL
    assert cfg.with_changes(base_delay=2).attempts == 3
    with pytest.raises(InvalidConfigurationError):
        cfg.with_changes(attempts=0)


def test_config_model_validate_raises_configuration_error() -> None:
    assert RetryConfig.model_validate({"attempts": 2}).attempts == 2
    with pytest.raises(InvalidConfigurationError):
        RetryConfig.model_validate({"strategy": "Bogus"})


# ═════════════════════════════════════════════════════════════════════════════
# Very late attempts
# ═════════════════════════════════════════════════════════════════════════════


def test_exponential_zero_base_stays_zero_past_float_range() -> None:
    assert ExponentialBackoff(base=0.0).delay(5000) == 0.0


def test_exponential_cap_holds_past_float_range() -> None:
    assert ExponentialBackoff(base=0.5, max_delay=30.0).delay(1100) == 30.0
    assert ExponentialBackoff(base=0.5, max_delay=0.0).delay(100_000) == 0.0


def test_uncapped_exponential_is_bounded_by_timeout_max() -> None:
    delay = ExponentialBackoff(base=1.0).delay(100_000)
    assert delay == threading.TIMEOUT_MAX
    assert math.isfinite(delay)
