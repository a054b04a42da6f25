"""Use case: check a batch of share links and summarize the run."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone

import structlog

from pancheck.domain.entities.check import CheckResult
from pancheck.domain.entities.task import ExecutionStatus, ScheduledTask, TaskExecution
from pancheck.domain.ports.link_checker import LinkCheckerPort
from pancheck.domain.ports.task_repository import TaskExecutionRepository

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class BatchReport:
    """Per-link results plus the execution record of the run."""

    execution: TaskExecution
    results: dict[str, CheckResult] = field(default_factory=dict)


class CheckLinksUseCase:
    """Checks many links concurrently and records one ``TaskExecution``.

    Real concurrency is bounded by each provider's governor, so all
    links are scheduled at once.  Duplicate links are checked once and
    share the result.

    Args:
        checker: Anything that checks a single link (usually the registry).
        executions: Optional repository for execution records.
    """

    def __init__(
        self,
        checker: LinkCheckerPort,
        executions: TaskExecutionRepository | None = None,
    ) -> None:
        self._checker = checker
        self._executions = executions

    async def execute(
        self,
        links: list[str],
        *,
        task: ScheduledTask | None = None,
        now: datetime | None = None,
    ) -> BatchReport:
        now = now or datetime.now(timezone.utc)
        task_id = task.id if task is not None and task.id is not None else 0
        unique_links = [u for u in dict.fromkeys(link.strip() for link in links) if u]

        execution = await self._save(
            TaskExecution(
                task_id=task_id,
                started_at=now,
                links_count=len(unique_links),
            )
        )

        if task is not None and task.is_expired(now):
            log.warning("batch_task_expired", task_id=task_id, name=task.name)
            execution = await self._finish(
                execution,
                ExecutionStatus.FAILED,
                started=time.monotonic(),
                error_message="task expired",
            )
            return BatchReport(execution=execution)

        log.info(
            "batch_check_started",
            task_id=task_id,
            total=len(links),
            unique=len(unique_links),
        )
        started = time.monotonic()
        checks = [
            asyncio.ensure_future(self._checker.check(link)) for link in unique_links
        ]
        try:
            verdicts = await asyncio.gather(*checks)
        except Exception as exc:
            # gather leaves the other checks running; stop them first.
            for check in checks:
                check.cancel()
            await asyncio.gather(*checks, return_exceptions=True)
            log.exception("batch_check_error", task_id=task_id)
            await self._finish(
                execution,
                ExecutionStatus.FAILED,
                started=started,
                error_message=str(exc) or type(exc).__name__,
            )
            raise

        results = dict(zip(unique_links, verdicts))
        valid = sum(1 for r in verdicts if r.valid)
        execution = await self._finish(
            replace(
                execution,
                checked_count=len(verdicts),
                valid_count=valid,
                invalid_count=len(verdicts) - valid,
            ),
            ExecutionStatus.SUCCESS,
            started=started,
        )
        log.info(
            "batch_check_completed",
            task_id=task_id,
            checked=execution.checked_count,
            valid=execution.valid_count,
            invalid=execution.invalid_count,
            duration_ms=execution.execution_duration_ms,
        )
        return BatchReport(execution=execution, results=results)

    async def _finish(
        self,
        execution: TaskExecution,
        status: ExecutionStatus,
        *,
        started: float,
        error_message: str = "",
    ) -> TaskExecution:
        duration_ms = int((time.monotonic() - started) * 1000)
        return await self._save(
            replace(
                execution,
                status=status,
                error_message=error_message,
                execution_duration_ms=duration_ms,
                finished_at=execution.started_at + timedelta(milliseconds=duration_ms),
            )
        )

    async def _save(self, execution: TaskExecution) -> TaskExecution:
        if self._executions is None:
            return execution
        return await self._executions.save(execution)
