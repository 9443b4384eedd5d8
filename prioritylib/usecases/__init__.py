"""Prioritization use-cases and comparison sessions."""

from prioritylib.usecases.compare import ComparisonSession, generate_comparison_pairs
from prioritylib.usecases.models import (
    BulkScoreReport,
    CompletionReport,
    CreateTaskRequest,
    DashboardData,
    TaskQuery,
    UseCaseResult,
)
from prioritylib.usecases.tasks import TaskUseCases

__all__ = [
    "BulkScoreReport",
    "ComparisonSession",
    "CompletionReport",
    "CreateTaskRequest",
    "DashboardData",
    "TaskQuery",
    "TaskUseCases",
    "UseCaseResult",
    "generate_comparison_pairs",
]
