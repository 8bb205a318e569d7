import math
import time
from collections import deque
from typing import Callable

from app.core.exceptions import RateLimitException


class RateLimiter:
    """
    Sliding-window request counter keyed by client.

    Keeps the timestamps of requests inside the window; a client that
    already has ``max_requests`` in the window is rejected until the oldest
    one ages out.
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def check(self, key: str) -> None:
        """
        Record a request for key.

        Raises:
            RateLimitException: If key is over budget; ``retryAfter`` holds whole seconds to wait
        """
        now = self._clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.setdefault(key, deque())
        self._prune(hits, now)

        if len(hits) >= self.max_requests:
            retry_after = math.ceil(hits[0] + self.window_seconds - now)
            raise RateLimitException("Too many requests", retryAfter=max(retry_after, 1))

        hits.append(now)

    def _prune(self, hits: deque[float], now: float) -> None:
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        """Forget clients with no requests left in the window"""
        for key in list(self._hits):
            self._prune(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def tracked_clients(self) -> int:
        return len(self._hits)

    def reset(self) -> None:
        self._hits.clear()
