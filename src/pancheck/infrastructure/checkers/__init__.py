"""Per-provider share-link checkers."""

from __future__ import annotations

from .base import BaseChecker
from .link_parser import LinkSyntax, ShareLinkParser
from .quark import QuarkChecker
from .redirect import RedirectResolver
from .registry import CheckerRegistry, extract_host
from .share_api import ShareApiChecker, ShareApiProfile
from .uc import UcChecker

__all__ = [
    "BaseChecker",
    "CheckerRegistry",
    "LinkSyntax",
    "QuarkChecker",
    "RedirectResolver",
    "ShareApiChecker",
    "ShareApiProfile",
    "ShareLinkParser",
    "UcChecker",
    "extract_host",
]
