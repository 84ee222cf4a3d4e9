"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Injectable clock for cooldown and rate-limit windows
- Remaining-seconds calculations
- Timestamp utilities
"""

import math
import time
from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic time in seconds."""

    def now(self) -> float:
        ...


class MonotonicClock:
    """Process clock backed by time.monotonic(); unaffected by wall-clock adjustments."""

    def now(self) -> float:
        return time.monotonic()


def seconds_remaining(started_at: float, window_seconds: float, now: float) -> int:
    """
    Whole seconds left in a window that began at `started_at`, rounded up.

    Returns 0 once the window has elapsed.
    """
    remaining = window_seconds - (now - started_at)
    if remaining <= 0:
        return 0
    return math.ceil(remaining)


def utc_timestamp() -> str:
    """
    Current UTC time as an ISO-8601 string.
    """
    return datetime.now(timezone.utc).isoformat()
