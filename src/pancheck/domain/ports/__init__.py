from .link_checker import LinkCheckerPort
from .task_repository import TaskExecutionRepository

__all__ = [
    "LinkCheckerPort",
    "TaskExecutionRepository",
]
