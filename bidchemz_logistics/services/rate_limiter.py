"""
In-memory fixed-window rate limiter.

Each key gets a window that opens on its first hit and lasts
``window_seconds``. Hits past ``max_requests`` inside the window are refused
until it closes. State lives in this process only, so limits are per worker.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from bidchemz_logistics.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of one hit against the limiter."""

    allowed: bool
    limit: int  # Max requests allowed
    remaining: int  # Requests remaining in window
    reset_at: float  # Unix timestamp when window resets
    retry_after: int  # Seconds until retry is allowed (0 when allowed)


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Counts hits per key in fixed windows."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests < 1 or window_seconds < 1:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def hit(self, key: str) -> RateLimitResult:
        """Register one request for ``key`` and report whether it may proceed."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                window = _Window(count=1, reset_at=now + self.window_seconds)
                self._windows[key] = window
            else:
                window.count += 1
            count, reset_at = window.count, window.reset_at

        if count > self.max_requests:
            return RateLimitResult(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                reset_at=reset_at,
                retry_after=max(1, math.ceil(reset_at - now)),
            )
        return RateLimitResult(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - count,
            reset_at=reset_at,
            retry_after=0,
        )

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def sweep(self) -> int:
        """Drop windows that have closed; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, window in self._windows.items() if now >= window.reset_at]
            for key in expired:
                del self._windows[key]
        if expired:
            logger.debug(f"[RATE_LIMIT] Swept {len(expired)} expired windows")
        return len(expired)

    def sweep_if_due(self) -> int:
        """Sweep at most once per window length; returns how many windows were removed."""
        now = self._clock()
        if now - self._last_sweep < self.window_seconds:
            return 0
        self._last_sweep = now
        return self.sweep()

    def __len__(self) -> int:
        return len(self._windows)
