"""Composition root: builds checkers and the registry from configuration."""

from __future__ import annotations

from dataclasses import replace

import httpx
import structlog

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.checkers.link_parser import ShareLinkParser
from pancheck.infrastructure.checkers.quark import QuarkChecker
from pancheck.infrastructure.checkers.redirect import RedirectResolver
from pancheck.infrastructure.checkers.registry import CheckerRegistry
from pancheck.infrastructure.checkers.share_api import ShareApiChecker
from pancheck.infrastructure.checkers.uc import UcChecker
from pancheck.infrastructure.common.governor import ProviderGovernor
from pancheck.infrastructure.config.schema import AppConfig, CheckerConfig

log = structlog.get_logger(__name__)

CHECKER_TYPES: dict[Platform, type[ShareApiChecker]] = {
    Platform.QUARK: QuarkChecker,
    Platform.UC: UcChecker,
}


def create_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared client; per-call timeouts come from the checkers."""
    return httpx.AsyncClient(
        headers={"User-Agent": config.http_user_agent},
        follow_redirects=False,
    )


def build_checker(
    platform: Platform,
    settings: CheckerConfig,
    *,
    http_client: httpx.AsyncClient,
    user_agent: str,
) -> ShareApiChecker:
    """Wire governor, resolver, parser and probe for one provider."""
    checker_cls = CHECKER_TYPES[platform]
    syntax = replace(
        checker_cls.default_syntax,
        password_min_length=settings.password_min_length,
        password_max_length=settings.password_max_length,
    )
    governor = ProviderGovernor(
        platform,
        concurrency_limit=settings.concurrency_limit,
        timeout=settings.timeout_seconds,
        min_interval=settings.min_interval_seconds,
    )
    resolver = RedirectResolver(
        http_client,
        max_redirects=settings.max_redirects,
        timeout=settings.redirect_timeout_seconds,
        headers={"User-Agent": user_agent},
    )
    parser = ShareLinkParser(
        syntax,
        resolver=resolver,
        redirect_timeout=settings.redirect_timeout_seconds,
    )
    return checker_cls(
        http_client=http_client,
        governor=governor,
        parser=parser,
        user_agent=user_agent,
        admission_timeout=settings.admission_timeout_seconds,
    )


def build_registry(config: AppConfig, http_client: httpx.AsyncClient) -> CheckerRegistry:
    """Register one checker per enabled provider."""
    registry = CheckerRegistry()
    for platform in CHECKER_TYPES:
        settings = config.checkers.for_platform(platform)
        if not settings.enabled:
            log.info("checker_disabled", platform=platform.value)
            continue
        registry.register(
            build_checker(
                platform,
                settings,
                http_client=http_client,
                user_agent=config.http_user_agent,
            )
        )
    log.info(
        "checker_registry_ready",
        platforms=[p.value for p in registry.supported_platforms],
    )
    return registry
