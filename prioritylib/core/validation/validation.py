"""
Validation of task records and loosely typed payloads.

Two layers live here:

1. ``validate_data`` turns pydantic parsing failures into the library's
   ValidationError with one ValidationErrorDetail per field.
2. ``validate_task`` checks the business rules of a TaskRecord and reports
   every violated rule, never just the first one.
"""

import logging
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from prioritylib.core.errors.errors import ErrorContext, ValidationError
from prioritylib.core.errors.models import ValidationErrorDetail
from prioritylib.core.models import StrictBaseModel
from prioritylib.domain.constants import MAX_BODY_LENGTH, MAX_TITLE_LENGTH
from prioritylib.domain.task.models import CreatedVia, TaskRecord, is_valid_deadline, is_valid_score

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

USER_ID_REQUIRED = "User ID is required"
BODY_REQUIRED = "Body is required"
BODY_TOO_LONG = f"Body must be {MAX_BODY_LENGTH} characters or less"
TITLE_TOO_LONG = f"Title must be {MAX_TITLE_LENGTH} characters or less"
NEGATIVE_SCORE = "Importance score must be non-negative"
INVALID_DEADLINE = "Invalid deadline format"


class ValidationResult(StrictBaseModel):
    """Outcome of a business-rule check."""

    valid: bool = Field(..., description="True when no rule was violated")
    errors: list[str] = Field(default_factory=list, description="Violated rules, in check order")

    @property
    def message(self) -> str:
        """All reasons joined into one string, as reported by use-cases."""
        return ", ".join(self.errors)

    def to_error(self, location: str = "task") -> ValidationError:
        return ValidationError(
            message=self.message,
            validation_errors=[
                ValidationErrorDetail(location=location, message=reason, error_type="business_rule")
                for reason in self.errors
            ],
            context=ErrorContext.create(
                error_type="validation",
                error_location=f"validation.{location}",
                component="task_validator",
                operation="validate_task",
            ),
        )


def _field_details(error: PydanticValidationError, location: str) -> list[ValidationErrorDetail]:
    details = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        details.append(
            ValidationErrorDetail(
                location=f"{location}.{path}" if path else location,
                message=item["msg"],
                error_type=item["type"],
            )
        )
    return details


def validate_data(
    data: Any,
    model_type: Type[T],
    location: str = "data",
    strict: bool = False
) -> T:
    """Parse ``data`` into ``model_type``; instances pass through untouched.

    Raises:
        ValidationError: One detail per failing field, located as
            ``"<location>.<field>"``.
    """
    if isinstance(data, model_type):
        return data

    try:
        return model_type.model_validate(data, strict=strict)
    except PydanticValidationError as e:
        details = _field_details(e, location)
        summary = ", ".join(f"{d.location}: {d.message}" for d in details)
        logger.debug(f"Rejected {model_type.__name__} payload at {location}: {summary}")
        raise ValidationError(
            message=f"Invalid {location}: {summary}",
            validation_errors=details,
            context=ErrorContext.create(
                error_type="payload",
                error_location=f"validate_data.{model_type.__name__}",
                component="payload_parser",
                operation=f"parse_{location}",
            ),
            cause=e,
        ) from e


def validate_task(task: TaskRecord) -> ValidationResult:
    """Check every business rule of ``task`` and collect all violations."""
    errors: list[str] = []

    if not task.user_id:
        errors.append(USER_ID_REQUIRED)

    if not task.body or not task.body.strip():
        errors.append(BODY_REQUIRED)

    if task.body and len(task.body) > MAX_BODY_LENGTH:
        errors.append(BODY_TOO_LONG)

    if task.title and len(task.title) > MAX_TITLE_LENGTH:
        errors.append(TITLE_TOO_LONG)

    if not is_valid_score(task.importance_score):
        errors.append(NEGATIVE_SCORE)

    if task.deadline and not is_valid_deadline(task.deadline):
        errors.append(INVALID_DEADLINE)

    if errors:
        logger.debug(f"Task {task.id} failed validation: {errors}")
    return ValidationResult(valid=not errors, errors=errors)


def validate_task_input(
    *,
    user_id: str,
    body: str,
    title: Optional[str] = None,
    deadline: Optional[str] = None,
    created_via: CreatedVia | str = CreatedVia.MANUAL,
) -> ValidationResult:
    """Validate form input before submission, without persisting anything."""
    draft = TaskRecord.create(
        user_id=user_id,
        body=body,
        title=title,
        deadline=deadline,
        created_via=created_via,
        task_id="validation-draft",
    )
    return validate_task(draft)
