"""Urgency/importance classification."""

from prioritylib.domain.classifier.classifier import (
    QuadrantClassifier,
    classify,
    is_due_soon,
    is_important,
    is_overdue,
    is_urgent,
)

__all__ = [
    "QuadrantClassifier",
    "classify",
    "is_due_soon",
    "is_important",
    "is_overdue",
    "is_urgent",
]
