"""Per-provider concurrency and rate governor.

Each provider owns exactly one :class:`ProviderGovernor`.  A check is
*admitted* once it holds one of ``concurrency_limit`` semaphore slots
and has drawn a token from a single-token bucket that refills every
``min_interval`` seconds.  Admission order across waiters is not FIFO;
only the two ceilings are guaranteed.
"""

from __future__ import annotations

import asyncio

import structlog

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.common.rate_limiter import TokenBucket

log = structlog.get_logger(__name__)


class ProviderGovernor:
    """Bounds simultaneous checks and spacing of admissions for one provider.

    Parameters:
        platform: Provider this governor belongs to.
        concurrency_limit: Max checks admitted at the same time (> 0).
        timeout: Per-check deadline in seconds (> 0).
        min_interval: Minimum seconds between two admissions (0 = none).
    """

    def __init__(
        self,
        platform: Platform,
        *,
        concurrency_limit: int,
        timeout: float,
        min_interval: float = 0.0,
    ) -> None:
        if concurrency_limit <= 0:
            raise ValueError("concurrency_limit must be > 0")
        if timeout <= 0:
            raise ValueError("timeout must be > 0")
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.platform = platform
        self._concurrency_limit = concurrency_limit
        self._timeout = timeout
        self._min_interval = min_interval
        self._semaphore = asyncio.Semaphore(concurrency_limit)
        self._bucket = TokenBucket.from_interval(min_interval)
        self._in_flight = 0

    @property
    def concurrency_limit(self) -> int:
        return self._concurrency_limit

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def in_flight(self) -> int:
        """Number of checks currently admitted."""
        return self._in_flight

    async def admit(self, timeout: float | None = None) -> None:
        """Block until a slot and the rate window are both available.

        Raises :class:`asyncio.TimeoutError` when *timeout* elapses first;
        in that case no slot is held.
        """
        if timeout is None:
            await self._acquire()
        else:
            try:
                await asyncio.wait_for(self._acquire(), timeout=timeout)
            except asyncio.TimeoutError:
                log.debug(
                    "governor_admission_timeout",
                    platform=self.platform.value,
                    timeout=timeout,
                    in_flight=self._in_flight,
                )
                raise
        self._in_flight += 1

    def release(self) -> None:
        """Free the slot taken by :meth:`admit`."""
        self._in_flight -= 1
        self._semaphore.release()

    async def _acquire(self) -> None:
        await self._semaphore.acquire()
        try:
            await self._bucket.acquire()
        except BaseException:
            self._semaphore.release()
            raise

    def snapshot(self) -> dict[str, object]:
        """Diagnostic view of the governor state."""
        return {
            "platform": self.platform.value,
            "concurrency_limit": self._concurrency_limit,
            "in_flight": self._in_flight,
            "min_interval": self._min_interval,
            "timeout": self._timeout,
        }
