"""
Rate limiting for the PlutusScan service.

Resolution calls the parameterization primitive once per validator per
pass, so /resolve is limited per client over a sliding window.
"""

import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional


@dataclass
class RateLimitResult:
    """Outcome of one limiter check."""
    allowed: bool
    remaining: int
    retry_after: Optional[float] = None


class RateLimiter:
    """Sliding window limiter keyed by client; safe to share between threads."""

    def __init__(self, rpm: int, window_seconds: float = 60.0):
        self.limit = max(1, rpm)
        self.window = window_seconds
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def _prune(self, hits: Deque[float], now: float) -> None:
        while hits and now - hits[0] >= self.window:
            hits.popleft()

    def check(self, key: str) -> RateLimitResult:
        """Record a request for key if the window has room."""
        now = time.monotonic()
        with self._lock:
            hits = self._hits[key]
            self._prune(hits, now)
            if len(hits) < self.limit:
                hits.append(now)
                return RateLimitResult(True, self.limit - len(hits))
            return RateLimitResult(False, 0, retry_after=self.window - (now - hits[0]))

    def allow(self, key: str) -> bool:
        return self.check(key).allowed

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
