"""Shared test fixtures for pancheck test suite."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Callable

import httpx
import pytest

from pancheck.domain.entities.check import Platform, ResourceLocator
from pancheck.domain.entities.task import TaskExecution
from pancheck.infrastructure.checkers.base import BaseChecker
from pancheck.infrastructure.checkers.link_parser import ShareLinkParser
from pancheck.infrastructure.checkers.quark import QUARK_SYNTAX, QuarkChecker
from pancheck.infrastructure.checkers.redirect import RedirectResolver
from pancheck.infrastructure.common.governor import ProviderGovernor

# ---------------------------------------------------------------------------
# Checker builders
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_quark_checker() -> Callable[..., QuarkChecker]:
    """Factory building a QuarkChecker around a given httpx client."""

    def _make(
        client: httpx.AsyncClient,
        *,
        timeout: float = 5.0,
        concurrency_limit: int = 5,
        min_interval: float = 0.0,
        max_redirects: int = 10,
        admission_timeout: float | None = None,
    ) -> QuarkChecker:
        governor = ProviderGovernor(
            Platform.QUARK,
            concurrency_limit=concurrency_limit,
            timeout=timeout,
            min_interval=min_interval,
        )
        resolver = RedirectResolver(client, max_redirects=max_redirects, timeout=2.0)
        parser = ShareLinkParser(QUARK_SYNTAX, resolver=resolver, redirect_timeout=2.0)
        return QuarkChecker(
            http_client=client,
            governor=governor,
            parser=parser,
            admission_timeout=admission_timeout,
        )

    return _make


class SleepyChecker(BaseChecker):
    """Checker whose probe only sleeps; records peak admitted checks."""

    platform_id = Platform.QUARK
    default_syntax = QUARK_SYNTAX

    def __init__(self, *, delay: float = 0.0, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.delay = delay
        self.peak_in_flight = 0
        self.probed: list[ResourceLocator] = []

    async def probe(self, locator: ResourceLocator, timeout: float) -> None:
        self.peak_in_flight = max(self.peak_in_flight, self.governor.in_flight)
        self.probed.append(locator)
        await asyncio.sleep(self.delay)


@pytest.fixture()
def make_sleepy_checker() -> Callable[..., SleepyChecker]:
    """Factory building a SleepyChecker with its own governor."""

    def _make(
        *,
        delay: float = 0.0,
        timeout: float = 5.0,
        concurrency_limit: int = 5,
        min_interval: float = 0.0,
        admission_timeout: float | None = None,
    ) -> SleepyChecker:
        governor = ProviderGovernor(
            Platform.QUARK,
            concurrency_limit=concurrency_limit,
            timeout=timeout,
            min_interval=min_interval,
        )
        return SleepyChecker(
            delay=delay,
            governor=governor,
            parser=ShareLinkParser(QUARK_SYNTAX),
            admission_timeout=admission_timeout,
        )

    return _make


# ---------------------------------------------------------------------------
# Provider API payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def token_body() -> Callable[..., dict]:
    """Factory for share-page token responses."""

    def _make(stoken: str | None = "tok", *, status: int = 200, code: int = 0) -> dict:
        return {
            "status": status,
            "code": code,
            "message": "ok" if code == 0 else "分享不存在",
            "data": {
                "title": "share",
                "stoken": stoken,
                "share_type": 0,
                "expired_at": 4102444800000,
            },
        }

    return _make


@pytest.fixture()
def detail_body() -> Callable[..., dict]:
    """Factory for share-page listing responses with *entries* files."""

    def _make(entries: int = 2) -> dict:
        return {
            "status": 200,
            "code": 0,
            "message": "ok",
            "data": {
                "is_owner": 0,
                "list": [
                    {"fid": f"f{i}", "file_name": f"movie{i}.mkv"}
                    for i in range(entries)
                ],
            },
            "metadata": {"_total": entries},
        }

    return _make


# ---------------------------------------------------------------------------
# Fake ports
# ---------------------------------------------------------------------------


class InMemoryExecutionRepository:
    """Keeps every saved TaskExecution; assigns ids on first save."""

    def __init__(self) -> None:
        self.saved: list[TaskExecution] = []
        self._next_id = 1

    async def save(self, execution: TaskExecution) -> TaskExecution:
        if execution.id is None:
            execution = replace(execution, id=self._next_id)
            self._next_id += 1
        self.saved.append(execution)
        return execution


@pytest.fixture()
def execution_repo() -> InMemoryExecutionRepository:
    return InMemoryExecutionRepository()
