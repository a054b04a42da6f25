"""Tests for ProviderGovernor."""

from __future__ import annotations

import asyncio
import time

import pytest

from pancheck.domain.entities.check import Platform
from pancheck.infrastructure.common.governor import ProviderGovernor


def _governor(**kwargs) -> ProviderGovernor:
    params = {"concurrency_limit": 2, "timeout": 5.0, "min_interval": 0.0}
    params.update(kwargs)
    return ProviderGovernor(Platform.QUARK, **params)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestGovernorInit:
    def test_properties(self) -> None:
        governor = _governor(concurrency_limit=4, timeout=3.0, min_interval=0.1)
        assert governor.platform is Platform.QUARK
        assert governor.concurrency_limit == 4
        assert governor.timeout == 3.0
        assert governor.min_interval == 0.1
        assert governor.in_flight == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"concurrency_limit": 0},
            {"timeout": 0.0},
            {"timeout": -1.0},
            {"min_interval": -0.1},
        ],
    )
    def test_rejects_invalid_limits(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            _governor(**kwargs)

    def test_snapshot(self) -> None:
        snap = _governor(concurrency_limit=3).snapshot()
        assert snap["platform"] == "quark"
        assert snap["concurrency_limit"] == 3
        assert snap["in_flight"] == 0


# ---------------------------------------------------------------------------
# Admission
# ---------------------------------------------------------------------------


class TestAdmission:
    @pytest.mark.asyncio
    async def test_admit_release_tracks_in_flight(self) -> None:
        governor = _governor()
        await governor.admit()
        assert governor.in_flight == 1
        await governor.admit()
        assert governor.in_flight == 2
        governor.release()
        assert governor.in_flight == 1
        governor.release()
        assert governor.in_flight == 0

    @pytest.mark.asyncio
    async def test_admission_timeout_holds_no_slot(self) -> None:
        governor = _governor(concurrency_limit=1)
        await governor.admit()
        with pytest.raises(asyncio.TimeoutError):
            await governor.admit(timeout=0.05)
        assert governor.in_flight == 1

        governor.release()
        await governor.admit(timeout=0.1)
        assert governor.in_flight == 1
        governor.release()

    @pytest.mark.asyncio
    async def test_concurrency_ceiling(self) -> None:
        governor = _governor(concurrency_limit=3)
        peak = 0

        async def work() -> None:
            nonlocal peak
            await governor.admit()
            try:
                peak = max(peak, governor.in_flight)
                await asyncio.sleep(0.02)
            finally:
                governor.release()

        await asyncio.gather(*(work() for _ in range(12)))
        assert peak == 3
        assert governor.in_flight == 0

    @pytest.mark.asyncio
    async def test_min_interval_spaces_admissions(self) -> None:
        governor = _governor(concurrency_limit=10, min_interval=0.05)
        stamps: list[float] = []

        async def work() -> None:
            await governor.admit()
            stamps.append(time.monotonic())
            governor.release()

        await asyncio.gather(*(work() for _ in range(3)))
        stamps.sort()
        gaps = [b - a for a, b in zip(stamps, stamps[1:])]
        assert all(gap >= 0.04 for gap in gaps)

    @pytest.mark.asyncio
    async def test_separate_governors_are_independent(self) -> None:
        quark = _governor(concurrency_limit=1)
        uc = ProviderGovernor(Platform.UC, concurrency_limit=1, timeout=5.0)
        await quark.admit()
        await uc.admit(timeout=0.1)
        assert uc.in_flight == 1
        quark.release()
        uc.release()
