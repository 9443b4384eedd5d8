"""Task, comparison and completion records.

TaskRecord is an immutable value object. Every "mutation" returns a new
record through ``model_copy`` and stamps ``updated_at`` so that it never
moves backwards.
"""

import math
import re
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from prioritylib.core.errors.errors import ErrorContext, ValidationError
from prioritylib.core.errors.models import ValidationErrorDetail
from prioritylib.domain.constants import (
    DEFAULT_IMPORTANCE_SCORE,
    DISPLAY_TITLE_LENGTH,
    TRIMMED_BODY_LENGTH,
)


_TAG_PATTERN = re.compile(r"<[^>]*>")


class TaskStatus(str, Enum):
    OPEN = "open"
    COMPLETED = "completed"


class CreatedVia(str, Enum):
    """Channel a task was created through."""

    MANUAL = "manual"
    SLACK_WEBHOOK = "slack_webhook"
    SLACK_URL = "slack_url"


class Quadrant(str, Enum):
    """Urgency x importance buckets."""

    URGENT_IMPORTANT = "urgent_important"
    NOT_URGENT_IMPORTANT = "not_urgent_important"
    URGENT_NOT_IMPORTANT = "urgent_not_important"
    NOT_URGENT_NOT_IMPORTANT = "not_urgent_not_important"

    @property
    def label(self) -> str:
        return {
            Quadrant.URGENT_IMPORTANT: "Urgent & important",
            Quadrant.NOT_URGENT_IMPORTANT: "Important, not urgent",
            Quadrant.URGENT_NOT_IMPORTANT: "Urgent, not important",
            Quadrant.NOT_URGENT_NOT_IMPORTANT: "Neither urgent nor important",
        }[self]


class UrgencyLevel(str, Enum):
    """Shortcut used by entry forms to pick a deadline."""

    NOW = "now"
    TODAY = "today"
    TOMORROW = "tomorrow"
    LATER = "later"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime, tz: tzinfo | None = None) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz or timezone.utc)
    return value


def _is_date_only(value: str) -> bool:
    return len(value.strip()) == 10


def parse_deadline(value: str, tz: tzinfo | None = None) -> datetime:
    """Parse an ISO-8601 deadline into an aware datetime.

    Date-only deadlines mean midnight at the start of that day in ``tz``
    (UTC when not given). Naive datetimes are read as UTC.

    Raises:
        ValueError: If ``value`` is not a valid ISO-8601 date or datetime
    """
    text = value.strip()
    if _is_date_only(text):
        day = date.fromisoformat(text)
        return datetime(day.year, day.month, day.day, tzinfo=tz or timezone.utc)
    return _aware(datetime.fromisoformat(text))


def deadline_date(value: str, tz: tzinfo | None = None) -> date:
    """Calendar date of a deadline as seen from timezone ``tz``."""
    text = value.strip()
    if _is_date_only(text):
        return date.fromisoformat(text)
    moment = parse_deadline(text)
    return moment.astimezone(tz or timezone.utc).date()


def is_valid_deadline(value: str) -> bool:
    try:
        parse_deadline(value)
    except ValueError:
        return False
    return True


def is_valid_score(value: float) -> bool:
    """Scores are finite and non-negative."""
    return math.isfinite(value) and value >= 0


def as_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC; aware values are returned unchanged."""
    return _aware(value)


class TaskUpdates(BaseModel):
    """Partial update payload for a task.

    Only fields that were explicitly provided are applied. Passing
    ``deadline=None`` clears the deadline; ``title=None`` clears the title.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: Optional[str] = Field(default=None, description="New title, None clears it")
    body: Optional[str] = Field(default=None, description="New body")
    deadline: Optional[str] = Field(default=None, description="New ISO-8601 deadline, None clears it")
    importance_score: Optional[float] = Field(
        default=None, allow_inf_nan=False, description="New importance score"
    )

    def changes(self) -> dict[str, Any]:
        """Return the explicitly provided fields as a dict."""
        provided = self.model_dump(exclude_unset=True)
        for key in ("body", "importance_score"):
            if key in provided and provided[key] is None:
                del provided[key]
        return provided

    @property
    def is_empty(self) -> bool:
        return not self.changes()


class TaskRecord(BaseModel):
    """One actionable item owned by a single user."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., description="Opaque unique id")
    user_id: str = Field(..., description="Owner user id")
    body: str = Field(..., description="Task body, may contain markup")
    title: Optional[str] = Field(default=None, description="Optional short title")
    deadline: Optional[str] = Field(default=None, description="ISO-8601 date or datetime")
    importance_score: float = Field(
        default=DEFAULT_IMPORTANCE_SCORE, allow_inf_nan=False, description="Pairwise rating score"
    )
    status: TaskStatus = Field(default=TaskStatus.OPEN)
    created_via: CreatedVia = Field(default=CreatedVia.MANUAL)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        *,
        user_id: str,
        body: str,
        title: Optional[str] = None,
        deadline: Optional[str] = None,
        created_via: Union[CreatedVia, str] = CreatedVia.MANUAL,
        importance_score: float = DEFAULT_IMPORTANCE_SCORE,
        task_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "TaskRecord":
        """Build a new open task.

        Empty titles and deadlines are stored as None. The record is not
        validated here; run it through the validation engine first.
        """
        stamp = _aware(now) if now else utcnow()
        return cls(
            id=task_id or str(uuid.uuid4()),
            user_id=user_id,
            title=title or None,
            body=body,
            deadline=deadline or None,
            importance_score=importance_score,
            status=TaskStatus.OPEN,
            created_via=CreatedVia(created_via),
            created_at=stamp,
            updated_at=stamp,
        )

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    @property
    def is_active(self) -> bool:
        return self.status is TaskStatus.OPEN

    def deadline_at(self, tz: tzinfo | None = None) -> Optional[datetime]:
        """Deadline as an aware datetime, or None when there is none."""
        if not self.deadline:
            return None
        return parse_deadline(self.deadline, tz)

    # Derived copies

    def _stamp(self, now: Optional[datetime]) -> datetime:
        stamp = _aware(now) if now else utcnow()
        previous = _aware(self.updated_at)
        return stamp if stamp >= previous else previous

    def update(
        self,
        changes: Union[TaskUpdates, Mapping[str, Any]],
        now: Optional[datetime] = None,
    ) -> "TaskRecord":
        """Return a copy with ``changes`` merged in."""
        if isinstance(changes, TaskUpdates):
            values = changes.changes()
        else:
            values = dict(changes)
        unknown = set(values) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown task fields: {sorted(unknown)}")
        values["updated_at"] = self._stamp(now)
        return self.model_copy(update=values)

    def complete(self, now: Optional[datetime] = None) -> "TaskRecord":
        return self.update({"status": TaskStatus.COMPLETED}, now)

    def reopen(self, now: Optional[datetime] = None) -> "TaskRecord":
        return self.update({"status": TaskStatus.OPEN}, now)

    def with_importance_score(self, score: float, now: Optional[datetime] = None) -> "TaskRecord":
        """Return a copy carrying a new importance score.

        Raises:
            ValidationError: If ``score`` is negative or not finite
        """
        if not is_valid_score(score):
            raise ValidationError(
                message="Importance score must be non-negative",
                validation_errors=[
                    ValidationErrorDetail(
                        location="importance_score",
                        message="Importance score must be non-negative",
                        error_type="value_error",
                    )
                ],
                context=ErrorContext.create(
                    error_type="validation",
                    error_location="TaskRecord.with_importance_score",
                    component="task_record",
                    operation="update_importance_score",
                ),
            )
        return self.update({"importance_score": float(score)}, now)

    # Display helpers

    def plain_text_body(self) -> str:
        """Body with markup tags removed."""
        return _TAG_PATTERN.sub("", self.body).strip()

    def trimmed_body(self, max_length: int = TRIMMED_BODY_LENGTH) -> str:
        plain = self.plain_text_body()
        if len(plain) <= max_length:
            return plain
        return plain[:max_length] + "..."

    def display_title(self) -> str:
        """Title if set, otherwise a short excerpt of the body."""
        if self.title and self.title.strip():
            return self.title
        return self.trimmed_body(DISPLAY_TITLE_LENGTH)

    def days_until_deadline(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole calendar days from today to the deadline (negative when past)."""
        if not self.deadline:
            return None
        current = _aware(now) if now else utcnow()
        return (deadline_date(self.deadline, current.tzinfo) - current.date()).days

    def formatted_deadline(self, now: Optional[datetime] = None) -> Optional[str]:
        days = self.days_until_deadline(now)
        if days is None:
            return None
        if days < 0:
            return f"Overdue by {abs(days)} day{'s' if abs(days) != 1 else ''}"
        if days == 0:
            return "Due today"
        if days == 1:
            return "Due tomorrow"
        return f"Due in {days} days"

    def urgency_from_deadline(self, now: Optional[datetime] = None) -> UrgencyLevel:
        """Map the deadline back onto the entry-form urgency shortcut."""
        days = self.days_until_deadline(now)
        if days == 0:
            return UrgencyLevel.TODAY
        if days == 1:
            return UrgencyLevel.TOMORROW
        return UrgencyLevel.LATER

    @staticmethod
    def deadline_from_urgency(
        urgency: Union[UrgencyLevel, str], now: Optional[datetime] = None
    ) -> Optional[str]:
        """ISO date for an entry-form urgency shortcut, None for "later"."""
        level = UrgencyLevel(urgency)
        current = _aware(now) if now else utcnow()
        if level in (UrgencyLevel.NOW, UrgencyLevel.TODAY):
            return current.date().isoformat()
        if level is UrgencyLevel.TOMORROW:
            return (current.date() + timedelta(days=1)).isoformat()
        return None


class ComparisonRecord(BaseModel):
    """One forced-choice outcome between two tasks of the same user."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    winner_id: str
    loser_id: str
    created_at: datetime = Field(default_factory=utcnow)

    def references(self, task_id: str) -> bool:
        return task_id in (self.winner_id, self.loser_id)


class CompletionRecord(BaseModel):
    """Marks when a task most recently moved to completed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    task_id: str
    user_id: str
    quadrant: Quadrant
    completed_at: datetime = Field(default_factory=utcnow)
