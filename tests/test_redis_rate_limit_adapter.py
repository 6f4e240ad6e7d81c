"""Unit tests for the Redis rate limiter adapter (Redis client mocked)."""

from unittest.mock import Mock

import pytest
import redis

from hoot.adapters.rate_limit.base import RATE_LIMIT_MESSAGE
from hoot.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter


def _limiter(script_result: list[int], *, limit: int = 60) -> tuple[RedisFixedWindowRateLimiter, Mock]:
    script = Mock(return_value=script_result)
    client = Mock()
    client.register_script.return_value = script
    limiter = RedisFixedWindowRateLimiter(
        client,
        limit=limit,
        window_seconds=60,
        clock=Mock(return_value=1000.0),
    )
    return limiter, script


def test_allowed_passes_key_and_window_to_script() -> None:
    limiter, script = _limiter([1, 1, 60000])

    result = limiter.consume("10.0.0.5")

    script.assert_called_once_with(keys=["hoot:ratelimit:10.0.0.5"], args=[1, 60, 60000])
    assert result.allowed is True
    assert result.remaining == 59
    assert result.reset_at == 1060
    assert result.message is None


def test_blocked_reports_retry_after_from_ttl() -> None:
    limiter, _ = _limiter([0, 60, 29500])

    result = limiter.consume("10.0.0.5")

    assert result.allowed is False
    assert result.remaining == 0
    assert result.retry_after_seconds == 30
    assert result.message == RATE_LIMIT_MESSAGE


def test_missing_ttl_falls_back_to_window() -> None:
    limiter, _ = _limiter([0, 60, -1])

    result = limiter.consume("k")

    assert result.retry_after_seconds == 60
    assert result.reset_at == 1060


def test_invalid_arguments() -> None:
    limiter, script = _limiter([1, 1, 60000])

    with pytest.raises(ValueError):
        limiter.consume("")
    with pytest.raises(ValueError):
        limiter.consume("k", cost=0)
    script.assert_not_called()

    with pytest.raises(ValueError):
        RedisFixedWindowRateLimiter(Mock(), limit=0, window_seconds=60)


def test_redis_outage_allows_request() -> None:
    script = Mock(side_effect=redis.exceptions.ConnectionError("connection refused"))
    client = Mock()
    client.register_script.return_value = script
    limiter = RedisFixedWindowRateLimiter(
        client, limit=60, window_seconds=60, clock=Mock(return_value=1000.0)
    )

    result = limiter.consume("10.0.0.5")

    assert result.allowed is True
    assert result.remaining == 60
    assert result.reset_at == 1060


def test_marked_as_blocking() -> None:
    limiter, _ = _limiter([1, 1, 60000])

    assert limiter.blocking is True
