"""Tests for the rate limit dependency and its wiring into the app."""

from unittest.mock import Mock, patch

import pytest
import redis
from fastapi.concurrency import run_in_threadpool
from fastapi.testclient import TestClient
from starlette.requests import Request

from hoot.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from hoot.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter
from hoot.core.errors import RateLimitAppError
from hoot.core.rate_limit import (
    UNKNOWN_CLIENT,
    enforce_rate_limit,
    extract_client_identifier,
    get_rate_limiter,
)


def _request(headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/regions",
        "root_path": "",
        "scheme": "http",
        "query_string": b"",
        "server": ("testserver", 80),
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    return Request(scope)


class TestClientIdentifier:
    def test_forwarded_for_wins(self) -> None:
        request = _request({"X-Forwarded-For": "10.0.0.5", "X-Real-IP": "10.0.0.9"})
        assert extract_client_identifier(request) == "10.0.0.5"

    def test_forwarded_for_is_used_whole(self) -> None:
        request = _request({"X-Forwarded-For": " 10.0.0.5, 172.16.0.1 "})
        assert extract_client_identifier(request) == "10.0.0.5, 172.16.0.1"

    def test_real_ip_fallback(self) -> None:
        assert extract_client_identifier(_request({"X-Real-IP": "10.0.0.9"})) == "10.0.0.9"

    def test_unknown_when_no_headers(self) -> None:
        assert extract_client_identifier(_request()) == UNKNOWN_CLIENT


class TestEnforceRateLimit:
    @pytest.mark.asyncio
    async def test_raises_with_headers_when_exhausted(self) -> None:
        limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)
        request = _request({"X-Forwarded-For": "10.0.0.5"})

        await enforce_rate_limit(request, limiter)
        with pytest.raises(RateLimitAppError) as exc_info:
            await enforce_rate_limit(request, limiter)

        exc = exc_info.value
        assert exc.code == "rate_limited"
        assert exc.message == "Rate limit exceeded. Please try again later."
        assert exc.headers is not None
        assert exc.headers["X-RateLimit-Limit"] == "1"
        assert exc.headers["X-RateLimit-Remaining"] == "0"
        assert int(exc.headers["Retry-After"]) > 0

    @pytest.mark.asyncio
    @patch("hoot.core.rate_limit.settings")
    async def test_disabled_skips_limiter(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = False
        limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)
        request = _request({"X-Forwarded-For": "10.0.0.5"})

        for _ in range(3):
            await enforce_rate_limit(request, limiter)

        assert limiter.current_count("10.0.0.5") == 0

    @pytest.mark.asyncio
    @patch("hoot.core.rate_limit.settings")
    async def test_headers_can_be_disabled(self, mock_settings) -> None:
        mock_settings.app.rate_limit_enabled = True
        mock_settings.app.rate_limit_include_headers = False
        limiter = InMemoryFixedWindowRateLimiter(limit=1, window_seconds=60)
        request = _request()

        await enforce_rate_limit(request, limiter)
        with pytest.raises(RateLimitAppError) as exc_info:
            await enforce_rate_limit(request, limiter)

        assert exc_info.value.headers is None

    @pytest.mark.asyncio
    async def test_redis_outage_does_not_fail_request(self) -> None:
        script = Mock(side_effect=redis.exceptions.TimeoutError("timed out"))
        client = Mock()
        client.register_script.return_value = script
        limiter = RedisFixedWindowRateLimiter(client, limit=1, window_seconds=60)
        request = _request({"X-Forwarded-For": "10.0.0.5"})

        for _ in range(3):
            await enforce_rate_limit(request, limiter)

        assert script.call_count == 3

    @pytest.mark.asyncio
    async def test_blocking_limiter_runs_in_threadpool(self) -> None:
        limiter = InMemoryFixedWindowRateLimiter(limit=5, window_seconds=60)
        limiter.blocking = True
        request = _request({"X-Forwarded-For": "10.0.0.5"})

        with patch("hoot.core.rate_limit.run_in_threadpool", wraps=run_in_threadpool) as spy:
            await enforce_rate_limit(request, limiter)

        spy.assert_called_once_with(limiter.consume, "10.0.0.5")
        assert limiter.current_count("10.0.0.5") == 1


class TestRateLimitedApp:
    @pytest.fixture
    def tight_client(self, app) -> TestClient:
        limiter = InMemoryFixedWindowRateLimiter(limit=2, window_seconds=60)
        app.dependency_overrides[get_rate_limiter] = lambda: limiter
        return TestClient(app)

    def test_third_request_gets_429(self, tight_client: TestClient) -> None:
        headers = {"X-Forwarded-For": "10.0.0.5"}
        for _ in range(2):
            assert tight_client.get("/api/referral-codes/validate", params={"code": "X"}, headers=headers).status_code == 200

        response = tight_client.get("/api/referral-codes/validate", params={"code": "X"}, headers=headers)

        assert response.status_code == 429
        body = response.json()
        assert body["error"]["code"] == "rate_limited"
        assert body["error"]["message"] == "Rate limit exceeded. Please try again later."
        assert "Retry-After" in response.headers
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_clients_are_isolated(self, tight_client: TestClient) -> None:
        for _ in range(2):
            tight_client.get("/api/referral-codes/validate", params={"code": "X"}, headers={"X-Forwarded-For": "10.0.0.5"})

        response = tight_client.get(
            "/api/referral-codes/validate", params={"code": "X"}, headers={"X-Forwarded-For": "10.0.0.6"}
        )
        assert response.status_code == 200

    def test_limit_runs_before_auth(self, tight_client: TestClient) -> None:
        for _ in range(2):
            assert tight_client.get("/api/credits").status_code == 401

        assert tight_client.get("/api/credits").status_code == 429

    def test_health_is_not_rate_limited(self, tight_client: TestClient) -> None:
        for _ in range(5):
            assert tight_client.get("/health").status_code == 200
