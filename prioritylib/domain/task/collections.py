"""Helpers over collections of task records."""

from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Optional

from prioritylib.domain.classifier.classifier import classify, is_overdue
from prioritylib.domain.constants import IMPORTANT_SCORE_THRESHOLD, URGENT_THRESHOLD_HOURS
from prioritylib.domain.task.models import Quadrant, TaskRecord, parse_deadline


class SortField(str, Enum):
    IMPORTANCE = "importance"
    DEADLINE = "deadline"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def sort_tasks(
    tasks: Iterable[TaskRecord],
    by: SortField | str = SortField.IMPORTANCE,
    order: SortOrder | str = SortOrder.DESC,
) -> list[TaskRecord]:
    """Return a sorted copy of ``tasks``.

    Tasks without a deadline always sort after tasks that have one.
    """
    field = SortField(by)
    descending = SortOrder(order) is SortOrder.DESC
    items = list(tasks)

    if field is SortField.IMPORTANCE:
        return sorted(items, key=lambda t: t.importance_score, reverse=descending)

    if field is SortField.CREATED_AT:
        return sorted(items, key=lambda t: t.created_at, reverse=descending)

    with_deadline = [t for t in items if t.deadline]
    without_deadline = [t for t in items if not t.deadline]
    with_deadline.sort(key=lambda t: parse_deadline(t.deadline), reverse=descending)
    return with_deadline + without_deadline


def filter_active(tasks: Iterable[TaskRecord]) -> list[TaskRecord]:
    return [task for task in tasks if task.is_active]


def filter_overdue(tasks: Iterable[TaskRecord], now: Optional[datetime] = None) -> list[TaskRecord]:
    return [task for task in tasks if is_overdue(task, now)]


def empty_quadrants() -> dict[Quadrant, list[TaskRecord]]:
    return {quadrant: [] for quadrant in Quadrant}


def group_by_quadrant(
    tasks: Iterable[TaskRecord],
    now: Optional[datetime] = None,
    *,
    important_threshold: float = IMPORTANT_SCORE_THRESHOLD,
    urgent_hours: float = URGENT_THRESHOLD_HOURS,
) -> dict[Quadrant, list[TaskRecord]]:
    """Group tasks by quadrant. All four quadrants are always present."""
    groups = empty_quadrants()
    for task in tasks:
        quadrant = classify(
            task, now, important_threshold=important_threshold, urgent_hours=urgent_hours
        )
        groups[quadrant].append(task)
    return groups
