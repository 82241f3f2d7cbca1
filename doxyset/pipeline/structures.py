"""Data contracts for conversion pipeline execution."""
from dataclasses import dataclass
from enum import Enum


class TaskStatus(Enum):
    """Status of a pipeline stage or generator."""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StageResult:
    """Result of a single pipeline stage."""
    name: str
    status: TaskStatus
    elapsed: float
    detail: str = ""

    @property
    def success(self) -> bool:
        """True if stage completed successfully."""
        return self.status == TaskStatus.SUCCESS
