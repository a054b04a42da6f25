"""Link-check exceptions.

``CheckFailure`` subclasses never escape ``BaseChecker.check``; they are
translated into a ``CheckResult`` carrying ``reason``.
"""

from __future__ import annotations

from pancheck.domain.entities.check import FailureReason


class CheckFailure(Exception):
    """Base class for failures that end a check with ``valid=False``."""

    def __init__(self, reason: FailureReason, detail: str = "") -> None:
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


class LinkFormatError(CheckFailure):
    """Raised when a link does not match the provider's share-link syntax."""


class ProbeFailure(CheckFailure):
    """Raised when a provider API step rejects the share or fails."""


class RedirectError(Exception):
    """Base class for redirect resolution failures."""


class RedirectTimeoutError(RedirectError):
    """Raised when redirect resolution exceeds its deadline."""


class RedirectNetworkError(RedirectError):
    """Raised on transport failures while following redirects."""


class TooManyRedirectsError(RedirectNetworkError):
    """Raised when the redirect chain is longer than the configured cap."""
