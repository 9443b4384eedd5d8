"""Optimistic client-side synchronisation."""

from prioritylib.sync.coordinator import OptimisticSyncCoordinator
from prioritylib.sync.models import (
    DashboardFilters,
    DashboardSnapshot,
    MutationAction,
    MutationOutcome,
    SyncPhase,
    ViewMode,
)

__all__ = [
    "DashboardFilters",
    "DashboardSnapshot",
    "MutationAction",
    "MutationOutcome",
    "OptimisticSyncCoordinator",
    "SyncPhase",
    "ViewMode",
]
