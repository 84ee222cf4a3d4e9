"""
app/services/cooldown_service.py

Purpose: Per-destination send cooldown

- Reserves a destination for a fixed window before the provider call
- Rolls the reservation back when the send fails
- Periodically purges stale entries to bound memory
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from app.core.logging import get_logger
from app.services.rate_limit_service import RateLimiter
from utils.time_utils import Clock, MonotonicClock, seconds_remaining

logger = get_logger(__name__)


@dataclass(frozen=True)
class CooldownDecision:
    allowed: bool
    remaining_seconds: int = 0


class CooldownStore:
    """
    Maps normalized destination -> monotonic time of the last accepted send attempt.

    A destination whose entry is younger than the cooldown window cannot be
    reserved again. Process-local; not shared between workers.
    """

    def __init__(
        self,
        cooldown_seconds: float = 10,
        retention_seconds: float = 3600,
        clock: Optional[Clock] = None
    ):
        self.cooldown_seconds = cooldown_seconds
        self.retention_seconds = retention_seconds
        self._clock = clock or MonotonicClock()
        self._lock = threading.Lock()
        self._entries: Dict[str, float] = {}

    def check_and_reserve(self, destination: str, now: Optional[float] = None) -> CooldownDecision:
        """
        Reserves the destination unless it is still cooling down.

        The check and the write happen under one lock, so two concurrent
        callers can never both be allowed.

        Args:
            destination: Normalized phone number
            now: Override for the current clock reading

        Returns:
            CooldownDecision; when denied, remaining_seconds is in 1..cooldown_seconds
        """
        now = self._clock.now() if now is None else now

        with self._lock:
            last_sent = self._entries.get(destination)
            if last_sent is not None:
                remaining = seconds_remaining(last_sent, self.cooldown_seconds, now)
                if remaining > 0:
                    return CooldownDecision(allowed=False, remaining_seconds=remaining)

            self._entries[destination] = now

        return CooldownDecision(allowed=True)

    def rollback(self, destination: str) -> None:
        """Drops the reservation so a failed attempt does not block a retry."""
        with self._lock:
            self._entries.pop(destination, None)

    def sweep(self, now: Optional[float] = None, retention_seconds: Optional[float] = None) -> int:
        """
        Deletes entries strictly older than the retention horizon.

        Returns:
            Number of entries removed
        """
        now = self._clock.now() if now is None else now
        retention = self.retention_seconds if retention_seconds is None else retention_seconds

        with self._lock:
            expired = [
                destination for destination, sent_at in self._entries.items()
                if now - sent_at > retention
            ]
            for destination in expired:
                del self._entries[destination]

        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, destination: str) -> bool:
        return destination in self._entries


async def run_periodic_sweep(
    cooldowns: CooldownStore,
    interval_seconds: float,
    rate_limiter: Optional[RateLimiter] = None
) -> None:
    """
    Background task: purges stale cooldown entries (and expired rate-limit
    buckets when a limiter is given) every interval_seconds until cancelled.
    """
    while True:
        await asyncio.sleep(interval_seconds)

        removed = cooldowns.sweep()
        if rate_limiter is not None:
            removed += rate_limiter.sweep()

        if removed:
            logger.debug(f"Sweep removed {removed} expired entries")
