"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: each worker keeps its own counters, so running N
  workers multiplies the effective limit by N.
- A window starts at a key's first request and lasts ``window_seconds``.
- Records are never evicted; memory grows with the number of distinct keys.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from hoot.adapters.rate_limit.base import (
    RATE_LIMIT_MESSAGE,
    AbstractRateLimiter,
    RateLimitResult,
)


@dataclass
class _WindowState:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Count requests per key inside a window anchored at the first request.

    Once a key has used its budget, further requests in the same window are
    rejected without touching the counter. The first request at or after
    ``reset_at`` opens a fresh window with a count of one.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_seconds: Size of the fixed window in seconds.
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._state_by_key: dict[str, _WindowState] = {}

    def current_count(self, key: str) -> int:
        """Return the counter for ``key`` (0 when the key was never seen)."""
        with self._lock:
            state = self._state_by_key.get(key)
            return state.count if state else 0

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume budget for ``key``.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            state = self._state_by_key.get(key)
            if state is None or now >= state.reset_at:
                state = _WindowState(count=0, reset_at=now + self._window_seconds)
                self._state_by_key[key] = state

            if state.count + cost <= self._limit:
                state.count += cost
                return RateLimitResult(
                    allowed=True,
                    limit=self._limit,
                    remaining=self._limit - state.count,
                    reset_at=int(math.ceil(state.reset_at)),
                )

            return RateLimitResult(
                allowed=False,
                limit=self._limit,
                remaining=max(0, self._limit - state.count),
                reset_at=int(math.ceil(state.reset_at)),
                retry_after_seconds=max(0, int(math.ceil(state.reset_at - now))),
                message=RATE_LIMIT_MESSAGE,
            )
