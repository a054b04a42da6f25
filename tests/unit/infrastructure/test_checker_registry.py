"""Tests for CheckerRegistry dispatch."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pancheck.domain.entities.check import CheckResult, Platform
from pancheck.infrastructure.checkers.registry import CheckerRegistry, extract_host


def _fake_checker(platform: Platform, hosts: set[str]) -> MagicMock:
    checker = MagicMock()
    checker.platform = platform
    checker.name = platform.value
    checker.supported_hosts = frozenset(hosts)
    checker.check = AsyncMock(return_value=CheckResult.ok(5))
    return checker


class TestExtractHost:
    def test_lowercases(self) -> None:
        assert extract_host("https://PAN.Quark.cn/s/abc") == "pan.quark.cn"

    def test_unparsable(self) -> None:
        assert extract_host("https://[broken/s/abc") == ""

    def test_no_host(self) -> None:
        assert extract_host("not a url") == ""


class TestCheckerRegistry:
    def test_register_maps_all_hosts(self) -> None:
        quark = _fake_checker(Platform.QUARK, {"pan.quark.cn", "pan.qoark.cn"})
        registry = CheckerRegistry([quark])
        assert registry.supported_platforms == [Platform.QUARK]
        assert registry.get(Platform.QUARK) is quark
        assert registry.get(Platform.UC) is None
        assert registry.checker_for("https://pan.qoark.cn/s/x") is quark

    def test_duplicate_platform_rejected(self) -> None:
        registry = CheckerRegistry([_fake_checker(Platform.QUARK, {"pan.quark.cn"})])
        with pytest.raises(ValueError, match="duplicate"):
            registry.register(_fake_checker(Platform.QUARK, {"other.cn"}))

    @pytest.mark.asyncio
    async def test_dispatches_by_host(self) -> None:
        quark = _fake_checker(Platform.QUARK, {"pan.quark.cn"})
        uc = _fake_checker(Platform.UC, {"drive.uc.cn"})
        registry = CheckerRegistry([quark, uc])

        await registry.check("https://drive.uc.cn/s/abc")

        uc.check.assert_awaited_once_with("https://drive.uc.cn/s/abc")
        quark.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_host(self) -> None:
        quark = _fake_checker(Platform.QUARK, {"pan.quark.cn"})
        registry = CheckerRegistry([quark])

        result = await registry.check("https://pan.baidu.com/s/1abc")

        assert result.valid is False
        assert result.failure_reason == "unsupported host"
        assert result.duration_ms == 0
        quark.check.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_registry(self) -> None:
        result = await CheckerRegistry().check("https://pan.quark.cn/s/abc")
        assert result.failure_reason == "unsupported host"
