from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path

from .protocol import ProtocolInfo

"""FileTask domain model and TaskStatus enum.

A FileTask tracks one input path through the batch lifecycle. It is owned by
the scheduler thread only; workers receive the immutable inputs they need and
return an outcome, they never touch the task itself.
"""

__all__ = [
    "TaskStatus",
    "FileTask",
]


class TaskStatus(Enum):
    """Lifecycle of a FileTask.

    State transitions: pending -> validated -> (succeeded | failed),
    or pending -> failed when validation rejects the file.
    """
    PENDING = "pending"
    VALIDATED = "validated"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_ALLOWED = {
    TaskStatus.PENDING: {TaskStatus.VALIDATED, TaskStatus.FAILED},
    TaskStatus.VALIDATED: {TaskStatus.SUCCEEDED, TaskStatus.FAILED},
    TaskStatus.SUCCEEDED: set(),
    TaskStatus.FAILED: set(),
}


@dataclass(frozen=True)
class FileTask:
    index: int  # position in the input path list
    path: Path
    status: TaskStatus = TaskStatus.PENDING
    protocol: ProtocolInfo | None = None
    error_type: str | None = None
    error: str | None = None

    @property
    def name(self) -> str:
        return self.path.name

    def _move(self, status: TaskStatus, **changes: object) -> FileTask:
        if status not in _ALLOWED[self.status]:
            raise ValueError(f"invalid transition {self.status.value} -> {status.value} for {self.name}")
        return replace(self, status=status, **changes)

    def validated(self, protocol: ProtocolInfo) -> FileTask:
        return self._move(TaskStatus.VALIDATED, protocol=protocol)

    def succeeded(self) -> FileTask:
        return self._move(TaskStatus.SUCCEEDED)

    def failed(self, error_type: str, error: str) -> FileTask:
        return self._move(TaskStatus.FAILED, error_type=error_type, error=error)
