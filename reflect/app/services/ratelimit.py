from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_in_seconds: float


class RateLimiter:
    """In-memory sliding window rate limiter keyed by caller."""

    def __init__(self, limit: int, window_seconds: float) -> None:
        self._limit = max(1, limit)
        self._window_seconds = window_seconds
        self._buckets: dict[str, deque[float]] = defaultdict(deque)

    @property
    def limit(self) -> int:
        return self._limit

    def check(self, key: str) -> RateLimitDecision:
        now = time.monotonic()
        bucket = self._buckets[key]
        while bucket and now - bucket[0] > self._window_seconds:
            bucket.popleft()
        if len(bucket) >= self._limit:
            reset = self._window_seconds - (now - bucket[0])
            return RateLimitDecision(False, 0, round(max(reset, 0.0), 3))
        bucket.append(now)
        reset = self._window_seconds - (now - bucket[0])
        return RateLimitDecision(True, self._limit - len(bucket), round(max(reset, 0.0), 3))

    def allow(self, key: str) -> bool:
        return self.check(key).allowed

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._buckets.clear()
        else:
            self._buckets.pop(key, None)


__all__ = ["RateLimitDecision", "RateLimiter"]
