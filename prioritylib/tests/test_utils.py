"""Test helpers shared across the suite."""

from datetime import datetime, timezone

from prioritylib.domain.task.models import TaskRecord

NOW = datetime(2025, 7, 30, 12, 0, tzinfo=timezone.utc)
USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def make_task(**overrides) -> TaskRecord:
    """TaskRecord with sensible defaults, created at NOW."""
    values = {"user_id": USER_ID, "body": "Write the quarterly report", "now": NOW}
    values.update(overrides)
    return TaskRecord.create(**values)
