"""Tests for ScheduledTask and TaskExecution."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pancheck.domain.entities.task import (
    ExecutionStatus,
    ScheduledTask,
    TaskExecution,
    TaskStatus,
)

_NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _task(**kwargs) -> ScheduledTask:
    defaults = {
        "name": "nightly",
        "link_source_command": "cat links.txt",
        "cron_expression": "0 3 * * *",
    }
    defaults.update(kwargs)
    return ScheduledTask(**defaults)


class TestScheduledTask:
    def test_defaults(self) -> None:
        task = _task()
        assert task.status == TaskStatus.STOPPED
        assert task.tags == ()
        assert task.auto_destroy_at is None

    def test_not_expired_without_destroy_time(self) -> None:
        assert _task(status=TaskStatus.ACTIVE).is_expired(_NOW) is False

    def test_expired_status(self) -> None:
        assert _task(status=TaskStatus.EXPIRED).is_expired(_NOW) is True

    def test_destroy_time_passed(self) -> None:
        task = _task(auto_destroy_at=_NOW - timedelta(seconds=1))
        assert task.is_expired(_NOW) is True

    def test_destroy_time_in_future(self) -> None:
        task = _task(auto_destroy_at=_NOW + timedelta(days=1))
        assert task.is_expired(_NOW) is False


class TestTaskExecution:
    def test_starts_running_with_zero_counts(self) -> None:
        execution = TaskExecution(task_id=3, started_at=_NOW)
        assert execution.status == ExecutionStatus.RUNNING
        assert execution.checked_count == 0
        assert execution.valid_count == 0
        assert execution.invalid_count == 0
        assert execution.finished_at is None
        assert execution.execution_duration_ms is None
