from __future__ import annotations

import re
import threading
import time
from typing import Callable

from cachetools import TTLCache

from jobgenie.utils.errors import ApiError

_WINDOWS = {"second": 1, "minute": 60, "hour": 3600}
_LIMIT_RE = re.compile(r"^\s*(\d+)\s*(?:per|/)\s*(second|minute|hour)s?\s*$", re.IGNORECASE)


def parse_limit(limit: str, default: tuple[int, int] = (300, 60)) -> tuple[int, int]:
    """``"300 per minute"`` -> ``(300, 60)``; unparseable strings fall back to ``default``."""
    m = _LIMIT_RE.match(str(limit or ""))
    if not m:
        return default
    return max(1, int(m.group(1))), _WINDOWS[m.group(2).lower()]


class InMemoryRateLimiter:
    """Fixed-window counters per process; a key's count resets when its window rolls over."""

    def __init__(self, *, max_keys: int = 50_000, clock: Callable[[], float] = time.monotonic):
        self._max_keys = max_keys
        self._clock = clock
        self._windows: dict[int, TTLCache] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: str) -> None:
        allowed, window = parse_limit(limit)
        window_id = int(self._clock() // window)
        with self._lock:
            counts = self._windows.get(window)
            if counts is None:
                # The TTL only evicts finished windows; the window id in the key does the reset.
                counts = self._windows[window] = TTLCache(maxsize=self._max_keys, ttl=2 * window, timer=self._clock)
            current = counts.get((key, window_id), 0) + 1
            counts[(key, window_id)] = current
        if current > allowed:
            raise ApiError("RATE_LIMITED", "Rate limit exceeded", status=429, details={"retry_after_seconds": window})
