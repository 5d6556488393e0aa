"""Per-token request budget.

Fixed one-hour windows keyed by token fingerprint. State is per process, so
with several workers the effective budget is multiplied by the worker count.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Optional

from fastapi import HTTPException, status

from portal.core.env import get_positive_int


RATE_LIMIT_ENV = "PORTAL_RATE_LIMIT_PER_HOUR"
DEFAULT_LIMIT_PER_HOUR = 600


class RateLimitExceeded(HTTPException):
    pass


@dataclass(slots=True)
class _Window:
    start_hour: int
    count: int


class InMemoryHourlyRateLimiter:
    def __init__(self, *, limit_per_hour: int, clock: Callable[[], float] = time.time) -> None:
        self._limit = limit_per_hour
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._current_hour: Optional[int] = None
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_count(self) -> int:
        return len(self._windows)

    def _prune(self, hour: int) -> None:
        """Drop windows from past hours; they can never be hit again."""
        self._windows = {k: w for k, w in self._windows.items() if w.start_hour >= hour}
        self._current_hour = hour

    def check(self, key: str) -> None:
        hour = int(self._clock()) // 3600
        with self._lock:
            if hour != self._current_hour:
                self._prune(hour)
            w = self._windows.get(key)
            if w is None or w.start_hour != hour:
                w = _Window(start_hour=hour, count=0)
                self._windows[key] = w
            w.count += 1
            exceeded = w.count > self._limit
        if exceeded:
            raise RateLimitExceeded(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Please reduce request cadence.",
            )


@lru_cache(maxsize=1)
def get_limiter() -> InMemoryHourlyRateLimiter:
    return InMemoryHourlyRateLimiter(
        limit_per_hour=get_positive_int(RATE_LIMIT_ENV, DEFAULT_LIMIT_PER_HOUR)
    )
