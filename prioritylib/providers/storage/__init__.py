"""Task storage collaborator."""

from prioritylib.providers.storage.base import (
    ComparisonScores,
    ScoreUpdate,
    StorageProviderSettings,
    StorageResult,
    TaskFilters,
    TaskStats,
    TaskStorageProvider,
)

__all__ = [
    "ComparisonScores",
    "ScoreUpdate",
    "StorageProviderSettings",
    "StorageResult",
    "TaskFilters",
    "TaskStats",
    "TaskStorageProvider",
]
