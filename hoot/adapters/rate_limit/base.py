"""Rate limiter interfaces.

The HTTP layer depends on this abstraction so the counter store can be
process-local (development, single instance) or shared (Redis) without
touching the routes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a consume operation.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX epoch seconds when the current window resets.
        retry_after_seconds: Suggested wait time in seconds when blocked.
        message: Human-readable reason when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None = None
    message: str | None = None


class AbstractRateLimiter(ABC):
    """Interface for fixed-window rate limiters.

    Implementations whose ``consume`` does network I/O set ``blocking`` so
    the HTTP layer runs them off the event loop.
    """

    blocking: bool = False

    @abstractmethod
    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for a given key.

        Args:
            key: Client identifier (e.g., forwarded IP address).
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
