"""Rate limiting adapters.

The in-memory limiter serves single-instance deployments; the Redis limiter
shares one counter per client across every running instance.
"""

from hoot.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from hoot.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from hoot.adapters.rate_limit.redis_store import RedisFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
    "RedisFixedWindowRateLimiter",
]
