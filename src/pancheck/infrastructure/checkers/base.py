"""Shared scaffolding for provider checkers.

``BaseChecker.check`` is the single entry point per link::

    admit -> start timer -> parse (maybe resolve alias) -> probe -> result

Every ordinary failure ends up inside the returned ``CheckResult``.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from typing import ClassVar

import structlog

from pancheck.domain.entities.check import (
    CheckResult,
    FailureReason,
    Platform,
    ResourceLocator,
)
from pancheck.domain.exceptions import CheckFailure
from pancheck.infrastructure.checkers.link_parser import LinkSyntax, ShareLinkParser
from pancheck.infrastructure.common.governor import ProviderGovernor

log = structlog.get_logger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class BaseChecker(ABC):
    """Checks share links of one provider.

    Subclasses implement :meth:`probe`, the provider-specific API
    dialogue, and raise :class:`~pancheck.domain.exceptions.ProbeFailure`
    to report a dead or unreachable share.

    Subclasses set ``platform_id`` and ``default_syntax``.

    Args:
        governor: The provider's concurrency/rate governor.
        parser: The provider's link parser.
        admission_timeout: Max seconds to wait for admission
            (``None`` = the governor's check timeout).
    """

    platform_id: ClassVar[Platform]
    default_syntax: ClassVar[LinkSyntax]

    def __init__(
        self,
        *,
        governor: ProviderGovernor,
        parser: ShareLinkParser,
        admission_timeout: float | None = None,
    ) -> None:
        if governor.platform != self.platform_id:
            raise ValueError(
                f"{type(self).__name__} needs a {self.platform_id.value} governor, "
                f"got {governor.platform.value}"
            )
        self._governor = governor
        self._parser = parser
        self._admission_timeout = (
            admission_timeout if admission_timeout is not None else governor.timeout
        )

    @property
    def platform(self) -> Platform:
        return self.platform_id

    @property
    def name(self) -> str:
        return self.platform.value

    @property
    def governor(self) -> ProviderGovernor:
        return self._governor

    @property
    def timeout(self) -> float:
        return self._governor.timeout

    @property
    def supported_hosts(self) -> frozenset[str]:
        return self._parser.syntax.hosts

    def supports(self, url: str) -> bool:
        return self._parser.supports(url)

    @abstractmethod
    async def probe(self, locator: ResourceLocator, timeout: float) -> None:
        """Run the provider dialogue for *locator*.

        Returns normally when the share is live.  *timeout* is the time
        left of the check deadline, for per-call transport timeouts.
        """

    async def check(self, link: str) -> CheckResult:
        """Check *link* and return its verdict; never raises for bad links."""
        waited = time.monotonic()
        try:
            await self._governor.admit(timeout=self._admission_timeout)
        except asyncio.TimeoutError:
            log.warning(
                "check_admission_timeout", link=link, **self._governor.snapshot()
            )
            return CheckResult.failed(
                FailureReason.REQUEST_TIMEOUT, _elapsed_ms(waited)
            )

        start = time.monotonic()
        try:
            result = await self._run(link, start)
        finally:
            self._governor.release()

        log.info(
            "check_completed",
            platform=self.name,
            link=link,
            valid=result.valid,
            reason=result.failure_reason,
            duration_ms=result.duration_ms,
        )
        return result

    async def _run(self, link: str, start: float) -> CheckResult:
        try:
            locator = await self._parser.parse(link)
        except CheckFailure as exc:
            log.info(
                "check_link_rejected",
                platform=self.name,
                link=link,
                reason=exc.reason.value,
                detail=exc.detail,
            )
            return CheckResult.failed(exc.reason, _elapsed_ms(start))

        remaining = self.timeout - (time.monotonic() - start)
        if remaining <= 0:
            return CheckResult.failed(
                FailureReason.REQUEST_TIMEOUT, _elapsed_ms(start)
            )

        try:
            await asyncio.wait_for(self.probe(locator, remaining), timeout=remaining)
        except asyncio.TimeoutError:
            log.warning(
                "check_deadline_exceeded",
                platform=self.name,
                resource_id=locator.resource_id,
                timeout=self.timeout,
            )
            return CheckResult.failed(
                FailureReason.REQUEST_TIMEOUT, _elapsed_ms(start)
            )
        except CheckFailure as exc:
            log.info(
                "check_probe_failed",
                platform=self.name,
                resource_id=locator.resource_id,
                reason=exc.reason.value,
                detail=exc.detail,
            )
            return CheckResult.failed(exc.reason, _elapsed_ms(start))

        return CheckResult.ok(_elapsed_ms(start))
