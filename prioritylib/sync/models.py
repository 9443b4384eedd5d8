"""State models of the optimistic sync coordinator."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from prioritylib.domain.task.models import Quadrant, TaskRecord
from prioritylib.providers.storage.base import TaskStats


class SyncPhase(str, Enum):
    """Where the local collection stands relative to the store."""
    STABLE = "stable"
    PENDING = "pending"
    ROLLED_BACK = "rolled_back"


class ViewMode(str, Enum):
    MATRIX = "matrix"
    LIST = "list"


class MutationAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    COMPLETE = "complete"
    REOPEN = "reopen"
    DELETE = "delete"


class DashboardFilters(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    show_overdue_only: bool = False
    view_mode: ViewMode = ViewMode.MATRIX


class MutationOutcome(BaseModel):
    """How one mutation resolved. Passed to success/error callbacks."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    action: MutationAction
    task_id: Optional[str] = None
    success: bool
    error: Optional[str] = None
    task: Optional[TaskRecord] = None


class DashboardSnapshot(BaseModel):
    """Read-only view of the coordinator, ready for rendering."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    tasks: list[TaskRecord] = Field(..., description="Visible tasks, sorted for the view mode")
    quadrants: dict[Quadrant, list[TaskRecord]]
    stats: TaskStats
    filters: DashboardFilters
    loading: bool
    error: Optional[str] = None
    phase: SyncPhase
