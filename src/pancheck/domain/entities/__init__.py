from .check import CheckResult, FailureReason, Platform, ResourceLocator
from .task import ExecutionStatus, ScheduledTask, TaskExecution, TaskStatus

__all__ = [
    "CheckResult",
    "ExecutionStatus",
    "FailureReason",
    "Platform",
    "ResourceLocator",
    "ScheduledTask",
    "TaskExecution",
    "TaskStatus",
]
