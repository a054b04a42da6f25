"""Share-link syntax validation and resource-id extraction.

Accepted shape::

    https://<canonical-or-alias-host>/s/<alnum-id>[?pwd=<password>][#<fragment>]

Alias hosts redirect to a canonical host; for those the resolved URL is
re-validated and the id is taken from it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import SplitResult, parse_qs, urlsplit

import structlog

from pancheck.domain.entities.check import FailureReason, ResourceLocator
from pancheck.domain.exceptions import LinkFormatError, RedirectError
from pancheck.infrastructure.checkers.redirect import RedirectResolver

log = structlog.get_logger(__name__)

_RESOURCE_ID_RE = re.compile(r"[A-Za-z0-9]+")


@dataclass(frozen=True)
class LinkSyntax:
    """Provider-specific share-link syntax and password policy."""

    canonical_hosts: frozenset[str]
    alias_hosts: frozenset[str] = frozenset()
    share_prefix: str = "/s/"
    password_param: str = "pwd"
    password_min_length: int = 2
    password_max_length: int = 50

    @property
    def hosts(self) -> frozenset[str]:
        return self.canonical_hosts | self.alias_hosts


def _split(raw_url: str) -> SplitResult:
    try:
        parts = urlsplit(raw_url.strip())
        # Accessing .port validates it; malformed ports raise ValueError.
        parts.port  # noqa: B018
    except ValueError as exc:
        raise LinkFormatError(FailureReason.BAD_LINK_FORMAT, str(exc)) from exc
    return parts


def _query_value(parts: SplitResult, key: str) -> str:
    values = parse_qs(parts.query).get(key)
    return values[0].strip() if values else ""


class ShareLinkParser:
    """Validates share links and extracts a :class:`ResourceLocator`.

    Args:
        syntax: The provider's link syntax.
        resolver: Redirect resolver used for alias hosts.
        redirect_timeout: Deadline for alias resolution in seconds.
    """

    def __init__(
        self,
        syntax: LinkSyntax,
        resolver: RedirectResolver | None = None,
        redirect_timeout: float = 10.0,
    ) -> None:
        self.syntax = syntax
        self._resolver = resolver
        self._redirect_timeout = redirect_timeout

    def supports(self, url: str) -> bool:
        """True if *url* points at one of this provider's hosts."""
        try:
            host = (urlsplit(url.strip()).hostname or "").lower()
        except ValueError:
            return False
        return host in self.syntax.hosts

    async def parse(self, raw_url: str) -> ResourceLocator:
        """Validate *raw_url* and return its resource id and password.

        Raises:
            LinkFormatError: The link is malformed or redirects elsewhere.
        """
        parts = _split(raw_url)

        if parts.scheme.lower() != "https":
            raise LinkFormatError(
                FailureReason.BAD_SCHEME, f"scheme {parts.scheme!r} is not https"
            )

        host = (parts.hostname or "").lower()
        if host not in self.syntax.hosts:
            raise LinkFormatError(
                FailureReason.UNSUPPORTED_HOST, f"host {host!r} is not supported"
            )

        if parts.username is not None or parts.port is not None:
            raise LinkFormatError(
                FailureReason.BAD_LINK_FORMAT, "userinfo or port in share link"
            )

        resource_id = self._strict_resource_id(parts.path)
        pass_code = _query_value(parts, self.syntax.password_param)
        self._check_password(pass_code)

        if host in self.syntax.alias_hosts:
            return await self._parse_alias(raw_url, pass_code)

        return ResourceLocator(resource_id=resource_id, pass_code=pass_code)

    def _strict_resource_id(self, path: str) -> str:
        prefix = self.syntax.share_prefix
        if not path.startswith(prefix):
            raise LinkFormatError(
                FailureReason.BAD_LINK_FORMAT, f"path {path!r} lacks {prefix!r}"
            )
        resource_id = path[len(prefix) :]
        if not resource_id:
            raise LinkFormatError(FailureReason.MISSING_RESOURCE_ID)
        if not _RESOURCE_ID_RE.fullmatch(resource_id):
            raise LinkFormatError(
                FailureReason.BAD_LINK_FORMAT,
                f"resource id {resource_id!r} is not alphanumeric",
            )
        return resource_id

    def _check_password(self, pass_code: str) -> None:
        if not pass_code:
            return
        low = self.syntax.password_min_length
        high = self.syntax.password_max_length
        if not low <= len(pass_code) <= high:
            raise LinkFormatError(
                FailureReason.INVALID_PASSWORD_LENGTH,
                f"password length {len(pass_code)} outside {low}-{high}",
            )

    async def _parse_alias(self, raw_url: str, pass_code: str) -> ResourceLocator:
        if self._resolver is None:
            raise LinkFormatError(
                FailureReason.REDIRECT_FAILURE, "no redirect resolver configured"
            )
        try:
            final_url = await self._resolver.resolve(
                raw_url.strip(), timeout=self._redirect_timeout
            )
        except RedirectError as exc:
            raise LinkFormatError(FailureReason.REDIRECT_FAILURE, str(exc)) from exc

        try:
            parts = urlsplit(final_url)
        except ValueError as exc:
            raise LinkFormatError(FailureReason.REDIRECT_FAILURE, str(exc)) from exc

        host = (parts.hostname or "").lower()
        if parts.scheme.lower() != "https" or host not in self.syntax.canonical_hosts:
            log.warning("alias_redirect_rejected", url=raw_url, final=final_url)
            raise LinkFormatError(
                FailureReason.REDIRECT_FAILURE,
                f"redirected to non-canonical host {host!r}",
            )

        prefix = self.syntax.share_prefix
        if not parts.path.startswith(prefix):
            raise LinkFormatError(
                FailureReason.REDIRECT_FAILURE,
                f"redirected path {parts.path!r} lacks {prefix!r}",
            )
        resource_id = parts.path[len(prefix) :].split("/")[0].strip()
        if not _RESOURCE_ID_RE.fullmatch(resource_id):
            raise LinkFormatError(
                FailureReason.REDIRECT_FAILURE,
                f"no resource id in redirected URL {final_url!r}",
            )

        # A password on the resolved URL wins over the alias one.
        pass_code = _query_value(parts, self.syntax.password_param) or pass_code
        self._check_password(pass_code)
        return ResourceLocator(resource_id=resource_id, pass_code=pass_code)
