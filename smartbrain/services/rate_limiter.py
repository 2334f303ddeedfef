"""Per-client sliding window limiter for the whole HTTP surface.

Keeps a deque of request timestamps per key in process memory, guarded by a
threading.Lock. State is lost on restart and is not shared between
processes; the monthly quota on the detection endpoint lives in the
database and is unaffected.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional


@dataclass
class RateLimitResult:
    """Result of a rate limit check."""

    allowed: bool
    remaining: int = 0
    retry_after: Optional[float] = None  # seconds until next allowed request


class InMemoryRateLimiter:
    """Sliding window rate limiter backed by in-memory deques."""

    _SWEEP_INTERVAL = 100  # sweep stale buckets every N checks

    def __init__(self, max_requests: int, window_seconds: float,
                 clock: Callable[[], float] = time.monotonic):
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._buckets: Dict[str, deque] = {}
        self._lock = threading.Lock()
        self._check_count = 0

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def check(self, key: str) -> RateLimitResult:
        """Check and record a request. Returns whether it's allowed."""
        now = self._clock()
        cutoff = now - self._window_seconds

        with self._lock:
            bucket = self._buckets.setdefault(key, deque())

            while bucket and bucket[0] <= cutoff:
                bucket.popleft()

            if len(bucket) < self._max_requests:
                bucket.append(now)
                result = RateLimitResult(allowed=True, remaining=self._max_requests - len(bucket))
            else:
                retry_after = bucket[0] + self._window_seconds - now
                result = RateLimitResult(allowed=False, retry_after=max(0.0, retry_after))

            # Sweep after recording so the current key's bucket is never dropped
            self._check_count += 1
            if self._check_count % self._SWEEP_INTERVAL == 0:
                self._sweep_stale(cutoff)
            return result

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
            self._check_count = 0

    def _sweep_stale(self, cutoff: float) -> None:
        """Remove buckets with no timestamps in the current window. Must hold _lock."""
        stale_keys: List[str] = []
        for k, b in self._buckets.items():
            while b and b[0] <= cutoff:
                b.popleft()
            if not b:
                stale_keys.append(k)
        for k in stale_keys:
            del self._buckets[k]
