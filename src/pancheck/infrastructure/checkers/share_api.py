"""Token + listing share-page dialogue used by Quark-family netdisks.

Validity is checked in two API calls:

1. ``POST <token_url>`` with ``{"pwd_id", "passcode",
   "support_visit_limit_private_share": true}`` →
   ``{"status": 200, "code": 0, "data": {"stoken": "..."}}``
2. ``GET <detail_url>?pwd_id=...&stoken=...`` →
   ``{"data": {"list": [...]}}``

A share is live when both calls succeed and the listing is non-empty.
Nothing is retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pancheck.domain.entities.check import FailureReason, ResourceLocator
from pancheck.domain.exceptions import ProbeFailure
from pancheck.infrastructure.checkers.base import BaseChecker
from pancheck.infrastructure.checkers.link_parser import ShareLinkParser
from pancheck.infrastructure.common.governor import ProviderGovernor

log = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class ShareApiProfile:
    """Endpoints and header values of one share-page API."""

    token_url: str
    detail_url: str
    origin: str
    referer: str
    extra_params: dict[str, str] = field(default_factory=dict)


# -- Response shapes --------------------------------------------------------


class _Lenient(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TokenData(_Lenient):
    title: str | None = None
    stoken: str | None = None
    expired_at: int | None = None


class TokenResponse(_Lenient):
    status: int = 0
    code: int = -1
    message: str = ""
    data: TokenData = Field(default_factory=TokenData)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v: Any) -> Any:
        return {} if v is None else v


class DetailData(_Lenient):
    entries: list[Any] = Field(default_factory=list, alias="list")

    @field_validator("entries", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v


class DetailResponse(_Lenient):
    status: int = 0
    code: int = -1
    message: str = ""
    data: DetailData = Field(default_factory=DetailData)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, v: Any) -> Any:
        return {} if v is None else v


_ResponseT = TypeVar("_ResponseT", bound=BaseModel)


def _decode(resp: httpx.Response, model: type[_ResponseT], step: str) -> _ResponseT:
    if resp.status_code != 200:
        raise ProbeFailure(
            FailureReason.REQUEST_ERROR,
            f"{step}: HTTP {resp.status_code}",
        )
    try:
        return model.model_validate(resp.json())
    except (ValueError, ValidationError) as exc:
        raise ProbeFailure(
            FailureReason.REQUEST_ERROR, f"{step}: invalid response body"
        ) from exc


class ShareApiChecker(BaseChecker):
    """Checks shares through the token + listing API described above.

    Subclasses set ``default_profile`` next to ``platform_id`` and
    ``default_syntax``.

    Args:
        http_client: Shared httpx.AsyncClient (injected).
        governor: The provider's governor.
        parser: The provider's link parser.
        profile: Endpoints and origin (``None`` = ``default_profile``).
        user_agent: Browser user agent sent with every call.
        admission_timeout: See :class:`BaseChecker`.
    """

    default_profile: ClassVar[ShareApiProfile]

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        governor: ProviderGovernor,
        parser: ShareLinkParser,
        profile: ShareApiProfile | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        admission_timeout: float | None = None,
    ) -> None:
        super().__init__(
            governor=governor, parser=parser, admission_timeout=admission_timeout
        )
        self._http = http_client
        self._profile = profile or self.default_profile
        self._user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        return {
            "user-agent": self._user_agent,
            "accept": "application/json, text/plain, */*",
            "accept-language": "zh-CN,zh;q=0.9",
            "origin": self._profile.origin,
            "referer": self._profile.referer,
        }

    async def probe(self, locator: ResourceLocator, timeout: float) -> None:
        stoken = await self._request_token(locator, timeout)
        await self._request_detail(locator.resource_id, stoken, timeout)
        log.debug("share_valid", platform=self.name, resource_id=locator.resource_id)

    async def _request_token(self, locator: ResourceLocator, timeout: float) -> str:
        body = {
            "pwd_id": locator.resource_id,
            "passcode": locator.pass_code,
            "support_visit_limit_private_share": True,
        }
        headers = {**self._headers(), "content-type": "application/json"}
        try:
            resp = await self._http.post(
                self._profile.token_url,
                params=self._profile.extra_params,
                json=body,
                headers=headers,
                timeout=timeout,
                follow_redirects=False,
            )
        except httpx.TimeoutException as exc:
            raise ProbeFailure(FailureReason.REQUEST_TIMEOUT, "token request") from exc
        except httpx.HTTPError as exc:
            raise ProbeFailure(
                FailureReason.REQUEST_ERROR, f"token request: {exc}"
            ) from exc

        data = _decode(resp, TokenResponse, "token")
        if data.status != 200 or data.code != 0:
            log.info(
                "share_rejected",
                platform=self.name,
                resource_id=locator.resource_id,
                status=data.status,
                code=data.code,
                message=data.message,
            )
            raise ProbeFailure(
                FailureReason.SHARE_EXPIRED_OR_MISSING,
                f"status={data.status} code={data.code} message={data.message!r}",
            )

        stoken = (data.data.stoken or "").strip()
        if not stoken:
            raise ProbeFailure(FailureReason.MISSING_ACCESS_TOKEN)
        return stoken

    async def _request_detail(
        self, resource_id: str, stoken: str, timeout: float
    ) -> None:
        params = {
            **self._profile.extra_params,
            "pwd_id": resource_id,
            "stoken": stoken,
        }
        headers = {
            **self._headers(),
            "cache-control": "no-cache",
            "pragma": "no-cache",
        }
        try:
            resp = await self._http.get(
                self._profile.detail_url,
                params=params,
                headers=headers,
                timeout=timeout,
                follow_redirects=False,
            )
        except httpx.TimeoutException as exc:
            raise ProbeFailure(
                FailureReason.REQUEST_TIMEOUT, "detail request"
            ) from exc
        except httpx.HTTPError as exc:
            raise ProbeFailure(
                FailureReason.REQUEST_ERROR, f"detail request: {exc}"
            ) from exc

        data = _decode(resp, DetailResponse, "detail")
        if not data.data.entries:
            raise ProbeFailure(FailureReason.EMPTY_LISTING)
