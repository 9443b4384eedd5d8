"""Request and response models for the prioritization use-cases."""

from datetime import datetime
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from prioritylib.domain.task.collections import SortField, SortOrder
from prioritylib.domain.task.models import (
    CompletionRecord,
    CreatedVia,
    Quadrant,
    TaskRecord,
    TaskStatus,
)
from prioritylib.providers.storage.base import TaskStats

DataT = TypeVar('DataT')


class UseCaseResult(BaseModel, Generic[DataT]):
    """What every use-case returns: data on success, a short reason on failure.

    A failed result may still carry data, for example the report of a
    partially applied bulk update.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    data: Optional[DataT] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Optional[DataT] = None) -> "UseCaseResult[DataT]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, data: Optional[DataT] = None) -> "UseCaseResult[DataT]":
        return cls(success=False, error=error, data=data)


class CreateTaskRequest(BaseModel):
    """Input for ``create_task``."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str
    body: str
    title: Optional[str] = None
    deadline: Optional[str] = None
    created_via: CreatedVia = CreatedVia.MANUAL


class TaskQuery(BaseModel):
    """Filters and ordering for ``get_tasks``."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: Optional[TaskStatus] = None
    overdue: bool = False
    quadrant: Optional[Quadrant] = None
    sort_by: Optional[SortField] = None
    sort_order: SortOrder = SortOrder.DESC


class DashboardData(BaseModel):
    """Tasks, their quadrant groups and the user's counters."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    tasks: list[TaskRecord]
    quadrants: dict[Quadrant, list[TaskRecord]]
    stats: TaskStats


class BulkScoreReport(BaseModel):
    """Outcome of a bulk importance score update."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    applied: int = Field(..., description="Updates written")
    failed: int = Field(..., description="Updates rejected before writing")
    failed_ids: list[str] = Field(default_factory=list, description="Task ids of rejected updates")

    @property
    def total(self) -> int:
        return self.applied + self.failed


class CompletionReport(BaseModel):
    """Completions in a time window grouped by the quadrant they were done in."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    start: datetime
    end: datetime
    completions: dict[Quadrant, list[CompletionRecord]]

    @property
    def total(self) -> int:
        return sum(len(records) for records in self.completions.values())

    @property
    def counts(self) -> dict[Quadrant, int]:
        return {quadrant: len(records) for quadrant, records in self.completions.items()}
