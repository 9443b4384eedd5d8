"""prioritylib: urgency/importance task prioritization with pairwise rating."""

__version__ = "0.1.0"

from prioritylib.core.container.container import ServiceContainer, create_memory_container
from prioritylib.core.settings.settings import PrioritySettings, load_settings
from prioritylib.domain.classifier.classifier import QuadrantClassifier, classify
from prioritylib.domain.rating.rating import RatingOutcome, rate_scores
from prioritylib.domain.task.models import Quadrant, TaskRecord, TaskStatus, TaskUpdates
from prioritylib.sync.coordinator import OptimisticSyncCoordinator
from prioritylib.usecases.tasks import TaskUseCases

__all__ = [
    "OptimisticSyncCoordinator",
    "PrioritySettings",
    "Quadrant",
    "QuadrantClassifier",
    "RatingOutcome",
    "ServiceContainer",
    "TaskRecord",
    "TaskStatus",
    "TaskUpdates",
    "TaskUseCases",
    "classify",
    "create_memory_container",
    "load_settings",
    "rate_scores",
]
