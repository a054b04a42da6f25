"""Port for task execution persistence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pancheck.domain.entities.task import TaskExecution


@runtime_checkable
class TaskExecutionRepository(Protocol):
    """Async interface for storing task execution records.

    ``save`` returns the stored execution; implementations assign ``id``
    on first save.
    """

    async def save(self, execution: TaskExecution) -> TaskExecution: ...
