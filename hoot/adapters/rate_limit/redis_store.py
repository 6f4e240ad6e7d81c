"""Redis-backed fixed-window rate limiter.

Shares counters between every API instance pointed at the same Redis. The
check and the increment run inside one Lua script, so concurrent requests
cannot push a key past its limit and rejected requests never bump the count.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

import redis

from hoot.adapters.rate_limit.base import (
    RATE_LIMIT_MESSAGE,
    AbstractRateLimiter,
    RateLimitResult,
)

logger = logging.getLogger(__name__)

# KEYS[1] counter key; ARGV: cost, limit, window_ms
# Returns {allowed (0/1), count, ttl_ms}
_CONSUME_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[1]) or '0')
local cost = tonumber(ARGV[1])
local limit = tonumber(ARGV[2])
if current + cost > limit then
  return {0, current, redis.call('PTTL', KEYS[1])}
end
current = redis.call('INCRBY', KEYS[1], cost)
if current == cost then
  redis.call('PEXPIRE', KEYS[1], ARGV[3])
end
return {1, current, redis.call('PTTL', KEYS[1])}
"""


class RedisFixedWindowRateLimiter(AbstractRateLimiter):
    """Fixed window per key, stored as a Redis counter with a TTL.

    When Redis cannot be reached the request is allowed and the outage is
    logged; the limiter never turns a Redis failure into an API error.
    """

    blocking = True

    def __init__(
        self,
        client: redis.Redis,
        *,
        limit: int,
        window_seconds: int,
        key_prefix: str = "hoot:ratelimit",
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._client = client
        self._limit = limit
        self._window_seconds = window_seconds
        self._key_prefix = key_prefix
        self._clock = clock
        self._script = client.register_script(_CONSUME_SCRIPT)

    @classmethod
    def from_url(cls, url: str, *, limit: int, window_seconds: int) -> "RedisFixedWindowRateLimiter":
        client = redis.Redis.from_url(
            url,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        return cls(client, limit=limit, window_seconds=window_seconds)

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        try:
            allowed, count, ttl_ms = self._script(
                keys=[f"{self._key_prefix}:{key}"],
                args=[cost, self._limit, self._window_seconds * 1000],
            )
        except redis.RedisError as exc:
            logger.error(
                "rate_limit.backend_unavailable",
                extra={"error_type": type(exc).__name__},
            )
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit,
                reset_at=int(math.ceil(now + self._window_seconds)),
            )

        ttl_ms = int(ttl_ms)
        # PTTL is negative when the key has no expiry or vanished
        ttl_seconds = ttl_ms / 1000 if ttl_ms > 0 else float(self._window_seconds)
        reset_at = int(math.ceil(now + ttl_seconds))
        remaining = max(0, self._limit - int(count))

        if int(allowed):
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=remaining,
                reset_at=reset_at,
            )

        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=remaining,
            reset_at=reset_at,
            retry_after_seconds=int(math.ceil(ttl_seconds)),
            message=RATE_LIMIT_MESSAGE,
        )
