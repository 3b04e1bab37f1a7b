"""In-memory login throttle."""

from __future__ import annotations

import threading
import time
from collections import deque

from ..errors import RateLimitedError


class LoginThrottle:
    """Sliding-window attempt counter keyed by client and path.

    State lives in process memory; each worker process counts on its own.
    Keys with no attempt inside the window are dropped.
    """

    def __init__(self, max_attempts: int, window_seconds: int):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._attempts: dict[str, deque] = {}
        self._lock = threading.Lock()

    def _prune(self, cutoff: float) -> None:
        stale = [k for k, q in self._attempts.items() if q[-1] < cutoff]
        for k in stale:
            del self._attempts[k]

    def check(self, key: str) -> None:
        """Record an attempt for `key`, raising `RateLimitedError` when over the limit."""
        now = time.monotonic()
        cutoff = now - self.window_seconds
        with self._lock:
            self._prune(cutoff)
            q = self._attempts.get(key)
            if q is None:
                q = self._attempts[key] = deque()
            while q and q[0] < cutoff:
                q.popleft()
            if len(q) >= self.max_attempts:
                retry_after = max(1, int(self.window_seconds - (now - q[0])))
                raise RateLimitedError(f"Too many login attempts; retry after {retry_after}s", retry_after)
            q.append(now)

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._attempts)

    def reset(self) -> None:
        with self._lock:
            self._attempts.clear()
