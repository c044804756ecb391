"""Shared rate gate for translation backends with adaptive backoff."""

import asyncio
import logging
import time
from typing import Dict, List, Optional

from config.constants import (
    CONCURRENCY_SHRINK_FACTOR,
    DEFAULT_RATE_LIMITS,
    DELAY_DECAY_FACTOR,
    GENERIC_RATE_LIMITS,
    MAX_ADAPTIVE_DELAY,
    SLOT_POLL_INTERVAL,
)
from .validators import is_throttling_error

logger = logging.getLogger(__name__)

MINUTE = 60.0
SECOND = 1.0


def get_default_limits(provider: str) -> Dict[str, int]:
    """Default limits for a provider family, generic fallback otherwise."""
    return dict(DEFAULT_RATE_LIMITS.get((provider or '').lower(), GENERIC_RATE_LIMITS))


class RateLimiter:
    """
    Gate bounding concurrent and time-windowed calls to a translation backend.

    Enforces, on every acquire:
    - a concurrency ceiling on in-flight requests
    - a requests-per-minute and a requests-per-second sliding window
    - the current adaptive delay, measured from the start of the acquire call

    Throttling reports double the delay (capped at 30s) and shrink the
    concurrency ceiling by 20% (floored at 1); successes slowly decay the
    delay back towards the base delay.

    Use as an async context manager so the slot is released on every path:

        async with limiter:
            await backend.translate(...)
    """

    def __init__(
        self,
        provider: str = '',
        requests_per_minute: Optional[int] = None,
        requests_per_second: Optional[int] = None,
        max_concurrent_requests: Optional[int] = None,
        base_delay: float = 1.0,
        adaptive: bool = True,
    ):
        defaults = get_default_limits(provider)
        self.requests_per_minute = requests_per_minute or defaults['requests_per_minute']
        self.requests_per_second = requests_per_second or defaults['requests_per_second']
        self.max_concurrent_requests = max_concurrent_requests or defaults['max_concurrent_requests']
        self.adaptive = adaptive
        self.base_delay = max(0.0, base_delay)
        self.current_delay = self.base_delay

        self._request_times: List[float] = []
        self._active_requests = 0
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, config) -> "RateLimiter":
        """Build a limiter from a TranslationConfig (overrides win over defaults)."""
        return cls(
            provider=config.provider,
            requests_per_minute=config.requests_per_minute,
            requests_per_second=config.requests_per_second,
            max_concurrent_requests=config.max_concurrent_requests,
            base_delay=config.delay,
            adaptive=config.adaptive_rate_limit,
        )

    def _clean_old_entries(self, current_time: float):
        """Drop timestamps that left the one-minute window."""
        minute_ago = current_time - MINUTE
        self._request_times = [t for t in self._request_times if t > minute_ago]

    def _required_wait(self, current_time: float, started_at: float) -> float:
        """Seconds to wait before a slot can be granted (0 when it can be granted now)."""
        waits = [0.0]

        if self._active_requests >= self.max_concurrent_requests:
            waits.append(SLOT_POLL_INTERVAL)

        if len(self._request_times) >= self.requests_per_minute:
            oldest = self._request_times[-self.requests_per_minute]
            waits.append(MINUTE - (current_time - oldest))

        second_ago = current_time - SECOND
        recent = [t for t in self._request_times if t > second_ago]
        if len(recent) >= self.requests_per_second:
            oldest_recent = recent[-self.requests_per_second]
            waits.append(SECOND - (current_time - oldest_recent))

        if self.current_delay > 0:
            waits.append(self.current_delay - (current_time - started_at))

        return max(waits)

    async def acquire(self):
        """Suspend until all limits allow one more request, then take a slot."""
        started_at = time.monotonic()
        while True:
            async with self._lock:
                current_time = time.monotonic()
                self._clean_old_entries(current_time)
                wait_time = self._required_wait(current_time, started_at)
                if wait_time <= 0:
                    self._request_times.append(current_time)
                    self._active_requests += 1
                    return
            await asyncio.sleep(wait_time)

    def release(self):
        """Give back a slot taken by acquire()."""
        self._active_requests = max(0, self._active_requests - 1)

    async def __aenter__(self) -> "RateLimiter":
        await self.acquire()
        return self

    async def __aexit__(self, *args):
        self.release()

    def report_throttled(self, failure) -> bool:
        """
        Feed a backend failure into the limiter.

        Returns True if the failure is throttling-shaped; in adaptive mode
        this also widens the delay and narrows the concurrency ceiling.
        """
        throttled = bool(getattr(failure, 'throttled', False)) or is_throttling_error(
            getattr(failure, 'status', None),
            getattr(failure, 'message', '') or '',
        )

        if throttled and self.adaptive:
            self.current_delay = min(self.current_delay * 2, MAX_ADAPTIVE_DELAY)
            self.max_concurrent_requests = max(
                1, int(self.max_concurrent_requests * CONCURRENCY_SHRINK_FACTOR)
            )
            logger.warning(
                f"Rate limit detected, adjusting limits: "
                f"delay={self.current_delay:.2f}s, "
                f"max_concurrent={self.max_concurrent_requests}"
            )

        return throttled

    def report_success(self):
        """Gradually relax the adaptive delay after a successful request."""
        if self.adaptive and self.current_delay > self.base_delay:
            self.current_delay = max(self.base_delay, self.current_delay * DELAY_DECAY_FACTOR)

    def get_stats(self) -> Dict:
        """Snapshot of the limiter state (read-only)."""
        minute_ago = time.monotonic() - MINUTE
        return {
            'current_delay': self.current_delay,
            'active_requests': self._active_requests,
            'max_concurrent_requests': self.max_concurrent_requests,
            'requests_last_minute': sum(1 for t in self._request_times if t > minute_ago),
        }
