"""In-memory per-key rate limiting."""

import threading
import time
from datetime import timedelta
from typing import Callable, Dict, Optional, Union


class InMemoryRateLimiter:
    """Minimum-interval gate keyed by sender id. Implements RateLimiterPort.

    The check and the timestamp update happen under one lock, so among
    simultaneous attempts for the same key only the first one through the
    lock succeeds.

    `evict_after` (seconds) prunes idle keys, sweeping at most once per
    `evict_after` window. It must be no shorter than the longest interval
    callers pass, or a pruned key could be granted early.
    """

    def __init__(
        self,
        evict_after: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._last: Dict[str, float] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._evict_after = evict_after
        self._last_sweep: Optional[float] = None

    def try_acquire(self, key: str, interval: Union[float, timedelta]) -> bool:
        """Return True and record the attempt if `interval` has elapsed for `key`."""
        if isinstance(interval, timedelta):
            interval = interval.total_seconds()

        with self._lock:
            now = self._clock()
            if self._evict_after is not None and (
                self._last_sweep is None or now - self._last_sweep >= self._evict_after
            ):
                self._evict(now)
            last = self._last.get(key)
            if last is not None and now - last < interval:
                return False
            self._last[key] = now
            return True

    def _evict(self, now: float):
        """Drop keys idle for longer than evict_after. Caller holds the lock."""
        stale = [k for k, ts in self._last.items() if now - ts > self._evict_after]
        for k in stale:
            del self._last[k]
        self._last_sweep = now

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)
