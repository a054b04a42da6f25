"""Port for checking netdisk share links."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pancheck.domain.entities.check import CheckResult


@runtime_checkable
class LinkCheckerPort(Protocol):
    """Checks whether a share link is still live.

    Implementations never raise for ordinary failures (bad format,
    timeouts, dead shares); those are reported inside the result.
    """

    async def check(self, link: str) -> CheckResult:
        """Check one link and return its verdict."""
        ...
