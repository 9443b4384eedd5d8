"""Error types raised inside prioritylib.

Every error carries an ``ErrorContext`` saying where it happened and what
was being attempted. Only these errors have messages a caller may see; any
other exception is reported as ``UNKNOWN_ERROR_MESSAGE`` once it reaches a
use-case boundary.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from .models import (
    ConsistencyErrorContext,
    ErrorContextData,
    OwnershipErrorContext,
    ProviderErrorContext,
    StorageErrorContext,
    ValidationErrorDetail,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class ErrorContext:
    """Where an error was raised, backed by a frozen ``ErrorContextData``."""

    def __init__(self, context_data: ErrorContextData):
        self._data = context_data

    @classmethod
    def create(
        cls, error_type: str, error_location: str, component: str, operation: str
    ) -> "ErrorContext":
        """Build a context stamped with the current UTC time."""
        return cls(
            ErrorContextData(
                error_type=error_type,
                error_location=error_location,
                component=component,
                operation=operation,
            )
        )

    @property
    def data(self) -> ErrorContextData:
        return self._data

    @property
    def timestamp(self) -> datetime:
        return self._data.timestamp

    def __str__(self) -> str:
        fields = ", ".join(f"{key}={value}" for key, value in self._data.model_dump().items())
        return f"ErrorContext({fields})"


class BaseError(Exception):
    """Root of the prioritylib error hierarchy.

    ``message`` is written for the person using the app, so it is passed
    through unchanged by ``error_message``.
    """

    def __init__(self, message: str, context: ErrorContext, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.context = context
        self.cause = cause
        self.raised_at = datetime.now(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form for structured logs."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "raised_at": self.raised_at.isoformat(),
            "context": self.context.data.model_dump(mode="json"),
            "cause": None if self.cause is None else str(self.cause),
        }

    def __str__(self) -> str:
        text = f"{type(self).__name__}: {self.message}"
        if self.cause is not None:
            text += f" (caused by: {self.cause})"
        return text


class ValidationError(BaseError):
    """One or more task rules were broken.

    ``validation_errors`` keeps every broken rule in the order it was
    checked; ``message`` is their joined summary.
    """

    def __init__(
        self,
        message: str,
        validation_errors: list[ValidationErrorDetail],
        context: ErrorContext,
        cause: Exception | None = None,
    ):
        super().__init__(message, context, cause)
        self.validation_errors = validation_errors

    @property
    def reasons(self) -> list[str]:
        return [detail.message for detail in self.validation_errors]

    def __str__(self) -> str:
        text = super().__str__()
        if not self.validation_errors:
            return text
        shown = [f"{d.location}: {d.message}" for d in self.validation_errors[:3]]
        hidden = len(self.validation_errors) - len(shown)
        if hidden:
            shown[-1] += f" (and {hidden} more)"
        return f"{text} - {'; '.join(shown)}"


class OwnershipError(BaseError):
    """The task does not exist or belongs to another user."""

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        ownership_context: OwnershipErrorContext,
        cause: Exception | None = None,
    ):
        super().__init__(message, context, cause)
        self.ownership_context = ownership_context


class StorageError(BaseError):
    """The storage collaborator reported a failure."""

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        storage_context: StorageErrorContext,
        cause: Exception | None = None,
    ):
        super().__init__(message, context, cause)
        self.storage_context = storage_context


class ProviderError(BaseError):
    """A provider could not be started."""

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        provider_context: ProviderErrorContext,
        cause: Exception | None = None,
    ):
        super().__init__(message, context, cause)
        self.provider_context = provider_context


class ConsistencyError(BaseError):
    """Related writes were only partly applied.

    Raised when a comparison was stored but the two re-rated scores were not.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        consistency_context: ConsistencyErrorContext,
        cause: Exception | None = None,
    ):
        super().__init__(message, context, cause)
        self.consistency_context = consistency_context


def error_message(error: BaseException) -> str:
    """Message a caller may see for ``error``."""
    if isinstance(error, BaseError):
        return error.message
    return UNKNOWN_ERROR_MESSAGE


def log_error(error: BaseError, level: int = logging.ERROR) -> None:
    """Log ``error`` at ``level``; cause and context go to debug."""
    logger.log(level, f"{type(error).__name__}: {error.message}")
    if error.cause is not None:
        logger.debug(f"{type(error).__name__} cause: {error.cause!r}")
    logger.debug(f"{type(error).__name__} context: {error.context.data.model_dump()}")
