"""Rate limiting dependency for FastAPI routes.

Strategy:
- Fixed-window limit per client identifier (60 requests / 60 s by default).
- The identifier is the ``X-Forwarded-For`` header value, then
  ``X-Real-IP``, then the literal ``"unknown"``. Both headers are taken at
  face value; this is only sound behind a reverse proxy that overwrites them.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool

from hoot.adapters.rate_limit.base import RATE_LIMIT_MESSAGE, AbstractRateLimiter
from hoot.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from hoot.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter
from hoot.core.config import settings
from hoot.core.errors import RateLimitAppError
from hoot.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[str, int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve counters across requests and
    rebuilt only when the relevant settings change.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_backend.lower(),
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
    )

    if _limiter is None or _limiter_config != config:
        backend, limit, window_seconds = config
        if backend == "redis":
            _limiter = RedisFixedWindowRateLimiter.from_url(
                settings.app.rate_limit_redis_url,
                limit=limit,
                window_seconds=window_seconds,
            )
        else:
            _limiter = InMemoryFixedWindowRateLimiter(
                limit=limit,
                window_seconds=window_seconds,
            )
        _limiter_config = config
        logger.info(
            "rate_limit.limiter_created",
            extra={"backend": backend, "limit": limit, "window_s": window_seconds},
        )

    return _limiter


def extract_client_identifier(request: Request) -> str:
    """Derive the rate-limit key for a request from forwarding headers."""
    forwarded_for = (request.headers.get("x-forwarded-for") or "").strip()
    if forwarded_for:
        return forwarded_for
    real_ip = (request.headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    return UNKNOWN_CLIENT


async def enforce_rate_limit(
    request: Request,
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> None:
    """FastAPI dependency enforcing the per-client request budget.

    Raises:
        RateLimitAppError: Rendered as HTTP 429 when the budget is exhausted.
    """

    if not settings.app.rate_limit_enabled:
        return

    client_id = extract_client_identifier(request)
    if limiter.blocking:
        result = await run_in_threadpool(limiter.consume, client_id)
    else:
        result = limiter.consume(client_id)

    if result.allowed:
        logger.debug(
            "rate_limit.allowed",
            extra={
                "client_hash": hash_identifier(client_id),
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "client_hash": hash_identifier(client_id),
            "limit": result.limit,
            "retry_after_s": retry_after,
            "request_path": request.url.path,
        },
    )

    headers: dict[str, str] | None = None
    if settings.app.rate_limit_include_headers:
        headers = {
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(result.reset_at),
        }

    raise RateLimitAppError(
        code="rate_limited",
        message=result.message or RATE_LIMIT_MESSAGE,
        details={"limit": result.limit, "retry_after": retry_after},
        headers=headers,
    )
