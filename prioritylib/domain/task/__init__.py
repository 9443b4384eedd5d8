"""Task, comparison and completion records."""

from prioritylib.domain.task.models import (
    ComparisonRecord,
    CompletionRecord,
    CreatedVia,
    Quadrant,
    TaskRecord,
    TaskStatus,
    TaskUpdates,
    UrgencyLevel,
)

__all__ = [
    "ComparisonRecord",
    "CompletionRecord",
    "CreatedVia",
    "Quadrant",
    "TaskRecord",
    "TaskStatus",
    "TaskUpdates",
    "UrgencyLevel",
]
