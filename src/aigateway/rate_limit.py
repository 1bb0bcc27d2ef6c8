"""Best-effort request throttling.

The gateway only depends on RateLimiter.allow(key). InMemoryRateLimiter keeps
fixed-window counters per client id inside one warm function instance; counts
are lost on cold start and are not shared between instances. A shared store
(e.g. a cache with TTL counters) can be plugged in by subclassing RateLimiter.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional

from .types import RateBucket
from .logging_util import get_logger

logger = get_logger(__name__)

def _now_ms() -> float:
    return time.monotonic() * 1000

class RateLimiter:
    def allow(self, key: str) -> bool:
        raise NotImplementedError

class InMemoryRateLimiter(RateLimiter):
    def __init__(
        self,
        window_ms: int = 60_000,
        max_requests: int = 40,
        sweep_interval_ms: Optional[int] = None,
        clock: Callable[[], float] = _now_ms,
    ):
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.sweep_interval_ms = sweep_interval_ms if sweep_interval_ms is not None else window_ms
        self._clock = clock
        self._buckets: Dict[str, RateBucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._buckets)

    def allow(self, key: str) -> bool:
        t = self._clock()
        with self._lock:
            if t - self._last_sweep > self.sweep_interval_ms:
                self._sweep(t)

            b = self._buckets.get(key)
            if b is None:
                b = RateBucket(window_start=t)
                self._buckets[key] = b
            if t - b.window_start > self.window_ms:
                b.window_start = t
                b.count = 0
            b.count += 1
            return b.count <= self.max_requests

    def _sweep(self, t: float):
        expired = [k for k, b in self._buckets.items() if t - b.window_start > self.window_ms]
        for k in expired:
            del self._buckets[k]
        self._last_sweep = t
        if expired:
            logger.debug("rate limiter swept %d expired buckets", len(expired))
