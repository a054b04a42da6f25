"""Token-bucket rate limiter for outgoing provider calls."""

from __future__ import annotations

import asyncio
import time


class TokenBucket:
    """Token-bucket rate limiter.

    Waiters are served one at a time under an :class:`asyncio.Lock`, so
    concurrent callers can never consume the same token.

    Args:
        rate: Tokens replenished per second. ``0`` disables limiting.
        burst: Maximum bucket size (allows short bursts).
    """

    def __init__(self, rate: float, burst: int = 1) -> None:
        self._rate = rate
        self._burst = burst
        self._tokens = float(burst)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()

    @classmethod
    def from_interval(cls, min_interval: float) -> TokenBucket:
        """Bucket admitting one call per *min_interval* seconds."""
        rate = 1.0 / min_interval if min_interval > 0 else 0.0
        return cls(rate=rate, burst=1)

    @property
    def rate(self) -> float:
        """Tokens-per-second rate."""
        return self._rate

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        if self._rate <= 0:
            return  # unlimited

        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                wait = (1.0 - self._tokens) / self._rate
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now
