"""Validation engine."""

from prioritylib.core.validation.validation import (
    ValidationResult,
    validate_data,
    validate_task,
    validate_task_input,
)

__all__ = [
    "ValidationResult",
    "validate_data",
    "validate_task",
    "validate_task_input",
]
