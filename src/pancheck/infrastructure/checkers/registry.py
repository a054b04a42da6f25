"""Registry that dispatches share-link checks to per-provider checkers."""

from __future__ import annotations

from urllib.parse import urlsplit

import structlog

from pancheck.domain.entities.check import CheckResult, FailureReason, Platform
from pancheck.infrastructure.checkers.base import BaseChecker

log = structlog.get_logger(__name__)


def extract_host(url: str) -> str:
    """Return the lower-cased hostname of *url*, or ``""`` if unparsable."""
    try:
        return (urlsplit(url.strip()).hostname or "").lower()
    except ValueError:
        return ""


class CheckerRegistry:
    """Dispatches links to the checker owning their hostname.

    Each provider keeps its own governor, so a slow provider never
    throttles another.
    """

    def __init__(self, checkers: list[BaseChecker] | None = None) -> None:
        self._checkers: dict[Platform, BaseChecker] = {}
        self._host_map: dict[str, BaseChecker] = {}
        for checker in checkers or []:
            self.register(checker)

    def register(self, checker: BaseChecker) -> None:
        """Register *checker* for its platform and every host it accepts."""
        if checker.platform in self._checkers:
            raise ValueError(f"duplicate checker for {checker.platform.value}")
        self._checkers[checker.platform] = checker
        for host in checker.supported_hosts:
            self._host_map[host] = checker
        log.debug(
            "checker_registered",
            platform=checker.name,
            hosts=sorted(checker.supported_hosts),
        )

    @property
    def supported_platforms(self) -> list[Platform]:
        return list(self._checkers)

    def get(self, platform: Platform) -> BaseChecker | None:
        return self._checkers.get(platform)

    def checker_for(self, url: str) -> BaseChecker | None:
        """Return the checker responsible for *url*, if any."""
        return self._host_map.get(extract_host(url))

    async def check(self, link: str) -> CheckResult:
        """Check *link* with its provider's checker.

        Links on unknown hosts fail with ``unsupported host`` without any
        network access.
        """
        checker = self.checker_for(link)
        if checker is None:
            log.info("check_unsupported_host", link=link, host=extract_host(link))
            return CheckResult.failed(FailureReason.UNSUPPORTED_HOST, 0)
        return await checker.check(link)
