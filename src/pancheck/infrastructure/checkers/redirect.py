"""Resolve alias share URLs to their canonical form by following redirects."""

from __future__ import annotations

import asyncio

import httpx
import structlog

from pancheck.domain.exceptions import (
    RedirectNetworkError,
    RedirectTimeoutError,
    TooManyRedirectsError,
)

log = structlog.get_logger(__name__)

_ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class RedirectResolver:
    """Follows HTTP redirects hop by hop and returns the final URL.

    Redirects are followed manually so the hop cap holds regardless of
    how the shared client is configured.  Response bodies are never
    read.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        max_redirects: Max redirect hops to follow (default: 10).
        timeout: Deadline for the whole chain in seconds (default: 10s).
        headers: Extra request headers (user agent etc.).
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        max_redirects: int = 10,
        timeout: float = 10.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._http = http_client
        self._max_redirects = max_redirects
        self._timeout = timeout
        self._headers = {"Accept": _ACCEPT_HTML, **(headers or {})}

    @property
    def max_redirects(self) -> int:
        return self._max_redirects

    async def resolve(self, url: str, timeout: float | None = None) -> str:
        """Return the URL at the end of the redirect chain starting at *url*.

        Raises:
            RedirectTimeoutError: The chain did not finish within *timeout*.
            TooManyRedirectsError: More than ``max_redirects`` hops.
            RedirectNetworkError: Any other transport failure.
        """
        deadline = self._timeout if timeout is None else timeout
        try:
            final_url = await asyncio.wait_for(
                self._follow(url, deadline), timeout=deadline
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            log.warning("redirect_timeout", url=url, timeout=deadline)
            raise RedirectTimeoutError(f"redirect timed out after {deadline}s") from exc
        except httpx.HTTPError as exc:
            log.warning("redirect_http_error", url=url, error=str(exc))
            raise RedirectNetworkError(str(exc)) from exc

        log.debug("redirect_resolved", original=url, final=final_url)
        return final_url

    async def _follow(self, url: str, timeout: float) -> str:
        request = self._http.build_request(
            "GET", url, headers=self._headers, timeout=timeout
        )
        hops = 0
        while True:
            response = await self._http.send(
                request, follow_redirects=False, stream=True
            )
            await response.aclose()

            if not response.has_redirect_location or response.next_request is None:
                return str(response.url)

            if hops >= self._max_redirects:
                log.warning(
                    "redirect_limit_exceeded",
                    url=url,
                    max_redirects=self._max_redirects,
                )
                raise TooManyRedirectsError(
                    f"exceeded {self._max_redirects} redirects"
                )
            hops += 1
            request = response.next_request
