"""Domain entities for share-link checks.

Pure value objects without I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Platform(Enum):
    """Supported netdisk providers."""

    QUARK = "quark"
    UC = "uc"


class FailureReason(str, Enum):
    """Failure categories reported in ``CheckResult.failure_reason``."""

    BAD_SCHEME = "bad scheme"
    BAD_LINK_FORMAT = "bad link format"
    UNSUPPORTED_HOST = "unsupported host"
    MISSING_RESOURCE_ID = "missing resource id"
    INVALID_PASSWORD_LENGTH = "invalid password length"
    REDIRECT_FAILURE = "redirect failure"
    REQUEST_TIMEOUT = "request timeout"
    REQUEST_ERROR = "request error"
    SHARE_EXPIRED_OR_MISSING = "share expired or missing"
    MISSING_ACCESS_TOKEN = "missing access token"
    EMPTY_LISTING = "empty listing"


@dataclass(frozen=True)
class ResourceLocator:
    """Resource identifier and access password extracted from a share link."""

    resource_id: str
    pass_code: str = ""


@dataclass(frozen=True)
class CheckResult:
    """Outcome of checking a single share link.

    ``failure_reason`` is empty iff ``valid``.  ``duration_ms`` is always
    set, also for failures.
    """

    valid: bool
    failure_reason: str = ""
    duration_ms: int = 0

    @classmethod
    def ok(cls, duration_ms: int) -> CheckResult:
        return cls(valid=True, failure_reason="", duration_ms=max(0, duration_ms))

    @classmethod
    def failed(cls, reason: FailureReason, duration_ms: int) -> CheckResult:
        return cls(
            valid=False,
            failure_reason=reason.value,
            duration_ms=max(0, duration_ms),
        )
