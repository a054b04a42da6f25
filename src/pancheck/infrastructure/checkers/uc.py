"""UC netdisk checker.

UC drive runs the same share-page API as Quark on its own hosts::

    https://drive.uc.cn/s/{pwd_id}
    https://drive.uc.cn/s/{pwd_id}?public=1&pwd={password}
"""

from __future__ import annotations

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.checkers.link_parser import LinkSyntax
from pancheck.infrastructure.checkers.share_api import ShareApiChecker, ShareApiProfile

UC_SYNTAX = LinkSyntax(canonical_hosts=frozenset({"drive.uc.cn"}))

UC_PROFILE = ShareApiProfile(
    token_url="https://pc-api.uc.cn/1/clouddrive/share/sharepage/token",
    detail_url="https://pc-api.uc.cn/1/clouddrive/share/sharepage/detail",
    origin="https://drive.uc.cn",
    referer="https://drive.uc.cn/",
    extra_params={"pr": "UCBrowser", "fr": "pc"},
)


class UcChecker(ShareApiChecker):
    """Checks UC drive share links."""

    platform_id = Platform.UC
    default_syntax = UC_SYNTAX
    default_profile = UC_PROFILE
