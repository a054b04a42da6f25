"""Quark netdisk checker.

Share links::

    https://pan.quark.cn/s/{pwd_id}
    https://pan.quark.cn/s/{pwd_id}?pwd={password}
    https://pan.quark.cn/s/{pwd_id}#/list/share
    https://pan.qoark.cn/s/{short_code}   (alias, redirects to pan.quark.cn)
"""

from __future__ import annotations

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.checkers.link_parser import LinkSyntax
from pancheck.infrastructure.checkers.share_api import ShareApiChecker, ShareApiProfile

QUARK_SYNTAX = LinkSyntax(
    canonical_hosts=frozenset({"pan.quark.cn"}),
    alias_hosts=frozenset({"pan.qoark.cn"}),
)

QUARK_PROFILE = ShareApiProfile(
    token_url="https://drive-h.quark.cn/1/clouddrive/share/sharepage/token",
    detail_url="https://drive-pc.quark.cn/1/clouddrive/share/sharepage/detail",
    origin="https://pan.quark.cn",
    referer="https://pan.quark.cn/",
)


class QuarkChecker(ShareApiChecker):
    """Checks Quark share links via the share-page token and detail APIs."""

    platform_id = Platform.QUARK
    default_syntax = QUARK_SYNTAX
    default_profile = QUARK_PROFILE
