"""Quadrant classification of tasks.

Pure functions: given the same task and the same ``now`` they always return
the same answer. ``now`` defaults to the current UTC time.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Optional

from prioritylib.domain.constants import IMPORTANT_SCORE_THRESHOLD, URGENT_THRESHOLD_HOURS
from prioritylib.domain.task.models import Quadrant, TaskRecord, deadline_date, parse_deadline


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def is_overdue(task: TaskRecord, now: Optional[datetime] = None) -> bool:
    """True when the deadline's date is before today. Time of day is ignored."""
    if not task.deadline:
        return False
    current = _now(now)
    return deadline_date(task.deadline, current.tzinfo) < current.date()


def is_due_soon(
    task: TaskRecord,
    now: Optional[datetime] = None,
    urgent_hours: float = URGENT_THRESHOLD_HOURS,
) -> bool:
    """True when the deadline lies between now and ``urgent_hours`` from now."""
    if not task.deadline:
        return False
    current = _now(now)
    remaining = parse_deadline(task.deadline, current.tzinfo) - current
    return timedelta(0) <= remaining <= timedelta(hours=urgent_hours)


def is_urgent(
    task: TaskRecord,
    now: Optional[datetime] = None,
    urgent_hours: float = URGENT_THRESHOLD_HOURS,
) -> bool:
    return is_overdue(task, now) or is_due_soon(task, now, urgent_hours)


def is_important(task: TaskRecord, important_threshold: float = IMPORTANT_SCORE_THRESHOLD) -> bool:
    return task.importance_score >= important_threshold


def classify(
    task: TaskRecord,
    now: Optional[datetime] = None,
    *,
    important_threshold: float = IMPORTANT_SCORE_THRESHOLD,
    urgent_hours: float = URGENT_THRESHOLD_HOURS,
) -> Quadrant:
    """Place ``task`` in one of the four urgency/importance quadrants."""
    urgent = is_urgent(task, now, urgent_hours)
    important = is_important(task, important_threshold)

    if urgent and important:
        return Quadrant.URGENT_IMPORTANT
    if important:
        return Quadrant.NOT_URGENT_IMPORTANT
    if urgent:
        return Quadrant.URGENT_NOT_IMPORTANT
    return Quadrant.NOT_URGENT_NOT_IMPORTANT


class QuadrantClassifier:
    """Classifier bound to configured thresholds and a clock."""

    def __init__(
        self,
        important_threshold: float = IMPORTANT_SCORE_THRESHOLD,
        urgent_hours: float = URGENT_THRESHOLD_HOURS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.important_threshold = important_threshold
        self.urgent_hours = urgent_hours
        self._clock = clock

    def now(self) -> datetime:
        return _now(self._clock() if self._clock else None)

    def classify(self, task: TaskRecord, now: Optional[datetime] = None) -> Quadrant:
        return classify(
            task,
            now or self.now(),
            important_threshold=self.important_threshold,
            urgent_hours=self.urgent_hours,
        )

    def is_overdue(self, task: TaskRecord, now: Optional[datetime] = None) -> bool:
        return is_overdue(task, now or self.now())
