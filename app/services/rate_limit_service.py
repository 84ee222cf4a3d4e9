"""
app/services/rate_limit_service.py

Purpose: Rate limiting and abuse prevention

- Caps send attempts per client address in a fixed time window
- Reports remaining attempts and retry-after hints
"""

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from app.core.logging import get_logger
from utils.time_utils import Clock, MonotonicClock, seconds_remaining

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after_seconds: int = 0


@dataclass
class RateWindow:
    window_start: float
    count: int = 0


class RateLimiter:
    """
    Fixed-window counter keyed by client address.

    A window opens on the first attempt from an address and resets once
    window_seconds have elapsed; it is never cleared explicitly.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: float = 900,
        clock: Optional[Clock] = None
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or MonotonicClock()
        self._lock = threading.Lock()
        self._windows: Dict[str, RateWindow] = {}

    def hit(self, key: str, now: Optional[float] = None) -> RateLimitDecision:
        """
        Records one attempt for key.

        Args:
            key: Client address
            now: Override for the current clock reading

        Returns:
            RateLimitDecision with allowed, remaining and retry_after_seconds
        """
        now = self._clock.now() if now is None else now

        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.window_start >= self.window_seconds:
                window = RateWindow(window_start=now)
                self._windows[key] = window

            if window.count >= self.max_requests:
                retry_after = max(1, seconds_remaining(window.window_start, self.window_seconds, now))

                logger.warning(
                    "Rate limit exceeded",
                    extra={
                        "client": key,
                        "count": window.count,
                        "max": self.max_requests
                    }
                )

                return RateLimitDecision(allowed=False, remaining=0, retry_after_seconds=retry_after)

            window.count += 1
            return RateLimitDecision(allowed=True, remaining=self.max_requests - window.count)

    def sweep(self, now: Optional[float] = None) -> int:
        """Drops buckets whose window has elapsed. Returns how many were removed."""
        now = self._clock.now() if now is None else now

        with self._lock:
            expired = [
                key for key, window in self._windows.items()
                if now - window.window_start >= self.window_seconds
            ]
            for key in expired:
                del self._windows[key]

        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)
