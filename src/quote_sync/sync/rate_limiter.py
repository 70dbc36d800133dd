# src/quote_sync/sync/rate_limiter.py

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0
MAX_CALLS_PER_MINUTE = 60


class RateLimiter:
    """
    Sliding one-minute window over downstream calls.

    Timestamps are appended in clock order, so stale entries are always at the head
    and are purged lazily on every read and write.
    """

    def __init__(
        self,
        max_calls: int = MAX_CALLS_PER_MINUTE,
        *,
        window_seconds: float = WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_calls = max(1, int(max_calls))
        self._window = float(window_seconds)
        self._clock = clock
        self._calls: deque[float] = deque()

    @property
    def max_calls(self) -> int:
        return self._max_calls

    def _purge(self, now: float) -> None:
        while self._calls and now - self._calls[0] >= self._window:
            self._calls.popleft()

    def record_call(self) -> None:
        now = self._clock()
        self._calls.append(now)
        self._purge(now)

    def is_over_limit(self) -> bool:
        self._purge(self._clock())
        over = len(self._calls) >= self._max_calls
        if over:
            logger.debug("Rate limit reached: %d calls in the last %.0fs", len(self._calls), self._window)
        return over

    def recent_call_count(self) -> int:
        self._purge(self._clock())
        return len(self._calls)
