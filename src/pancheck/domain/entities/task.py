"""Scheduled task and execution records.

These mirror the records kept by the external scheduler.  The checking
engine never reads or writes them; only the batch use case builds
``TaskExecution`` values from check results.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TaskStatus(str, Enum):
    ACTIVE = "active"
    STOPPED = "stopped"
    EXPIRED = "expired"


class ExecutionStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ScheduledTask:
    """A periodically executed link-check job."""

    name: str
    link_source_command: str
    cron_expression: str
    id: int | None = None
    description: str = ""
    tags: tuple[str, ...] = ()
    transform_script: str = ""
    auto_destroy_at: datetime | None = None
    status: TaskStatus = TaskStatus.STOPPED
    last_run_at: datetime | None = None
    next_run_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """True once the task is marked expired or its destroy time has passed."""
        if self.status == TaskStatus.EXPIRED:
            return True
        return self.auto_destroy_at is not None and self.auto_destroy_at <= now


@dataclass(frozen=True)
class TaskExecution:
    """Aggregated outcome of one task run over a batch of links."""

    task_id: int
    started_at: datetime
    status: ExecutionStatus = ExecutionStatus.RUNNING
    id: int | None = None
    links_count: int = 0
    checked_count: int = 0
    valid_count: int = 0
    invalid_count: int = 0
    error_message: str = ""
    execution_duration_ms: int | None = None
    finished_at: datetime | None = None
