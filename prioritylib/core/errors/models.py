"""Context models attached to prioritylib errors."""

from datetime import datetime, timezone

from pydantic import Field

from prioritylib.core.models import StrictBaseModel


class ErrorContextData(StrictBaseModel):
    """Where an error was raised and what was being attempted."""

    error_type: str = Field(..., description="Short error category, e.g. 'ownership'")
    error_location: str = Field(..., description="Class and method that raised")
    component: str = Field(..., description="Component name used in logs")
    operation: str = Field(..., description="Operation that was running")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC time the context was created",
    )


class ValidationErrorDetail(StrictBaseModel):
    """One broken rule."""

    location: str = Field(..., description="Field the rule applies to")
    message: str = Field(..., description="Reason shown to the user")
    error_type: str = Field(..., description="Rule or pydantic error code")


class OwnershipErrorContext(StrictBaseModel):
    """Records which task an ownership check rejected, for logs only.

    This never reaches callers: not-found and not-owned look identical to them.
    """

    task_id: str = Field(..., description="Task the user tried to act on")
    user_id: str = Field(..., description="Acting user")
    task_exists: bool = Field(default=False, description="True when the task exists but is owned by someone else")


class StorageErrorContext(StrictBaseModel):
    provider_name: str = Field(..., description="Storage provider that failed")
    operation: str = Field(..., description="Storage call that failed")


class ConsistencyErrorContext(StrictBaseModel):
    """Context for a write that left related records out of step."""

    operation: str = Field(..., description="Operation that was partially applied")
    record_ids: list[str] = Field(..., description="Records affected by the partial write")


class ProviderErrorContext(StrictBaseModel):
    provider_name: str = Field(..., description="Provider that failed to start")
    provider_type: str = Field(..., description="'storage' or 'identity'")
    operation: str = Field(..., description="Lifecycle step that failed")
