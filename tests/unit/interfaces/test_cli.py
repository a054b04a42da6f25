"""Tests for the pancheck CLI."""

from __future__ import annotations

import io
import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from pancheck.application.use_cases.check_links import BatchReport
from pancheck.domain.entities.check import CheckResult, FailureReason
from pancheck.domain.entities.task import ExecutionStatus, TaskExecution
from pancheck.interfaces.cli import cli


def _report() -> BatchReport:
    execution = TaskExecution(
        task_id=0,
        started_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        status=ExecutionStatus.SUCCESS,
        links_count=2,
        checked_count=2,
        valid_count=1,
        invalid_count=1,
        execution_duration_ms=120,
    )
    return BatchReport(
        execution=execution,
        results={
            "https://pan.quark.cn/s/good1": CheckResult.ok(80),
            "https://pan.quark.cn/s/gone1": CheckResult.failed(
                FailureReason.EMPTY_LISTING, 95
            ),
        },
    )


class TestReadLinks:
    def test_skips_blanks_and_comments(self) -> None:
        lines = ["# exported\n", "\n", "  https://pan.quark.cn/s/a  \n", "https://drive.uc.cn/s/b"]
        assert cli.read_links(lines) == [
            "https://pan.quark.cn/s/a",
            "https://drive.uc.cn/s/b",
        ]


class TestPrintReport:
    def test_text(self) -> None:
        out = io.StringIO()
        cli.print_report(_report(), as_json=False, out=out)
        lines = out.getvalue().splitlines()
        assert lines[0] == "VALID   https://pan.quark.cn/s/good1 (80 ms)"
        assert lines[1] == "INVALID https://pan.quark.cn/s/gone1 [empty listing] (95 ms)"
        assert lines[2] == "checked=2 valid=1 invalid=1 duration=120 ms"

    def test_json(self) -> None:
        out = io.StringIO()
        cli.print_report(_report(), as_json=True, out=out)
        rows = [json.loads(line) for line in out.getvalue().splitlines()]
        assert rows[0] == {
            "link": "https://pan.quark.cn/s/good1",
            "valid": True,
            "failure_reason": "",
            "duration_ms": 80,
        }
        assert rows[1]["failure_reason"] == "empty listing"
        assert rows[2] == {
            "summary": {"checked": 2, "valid": 1, "invalid": 1, "duration_ms": 120}
        }


class TestStart:
    def test_show_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.start(["--show-config", "--log-level", "DEBUG"]) == 0
        dumped = yaml.safe_load(capsys.readouterr().out)
        assert dumped["logging"]["level"] == "DEBUG"
        assert dumped["checkers"]["quark"]["concurrency_limit"] == 5

    def test_no_links(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(cli, "configure_logging", lambda config: None)
        assert cli.start([]) == 2

    def test_exit_status_reflects_invalid_links(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        seen: list[str] = []

        async def fake_run(config, links):
            seen.extend(links)
            return _report()

        monkeypatch.setattr(cli, "configure_logging", lambda config: None)
        monkeypatch.setattr(cli, "_run", fake_run)
        links_file = tmp_path / "links.txt"
        links_file.write_text("# list\nhttps://pan.quark.cn/s/gone1\n", encoding="utf-8")

        code = cli.start(
            ["https://pan.quark.cn/s/good1", "--links-file", str(links_file)]
        )

        assert code == 1
        assert seen == ["https://pan.quark.cn/s/good1", "https://pan.quark.cn/s/gone1"]
        assert "checked=2" in capsys.readouterr().out
