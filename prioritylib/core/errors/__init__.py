"""Structured errors for prioritylib."""

from prioritylib.core.errors.errors import (
    UNKNOWN_ERROR_MESSAGE,
    BaseError,
    ConsistencyError,
    ErrorContext,
    OwnershipError,
    ProviderError,
    StorageError,
    ValidationError,
    error_message,
    log_error,
)
from prioritylib.core.errors.models import (
    ConsistencyErrorContext,
    ErrorContextData,
    OwnershipErrorContext,
    ProviderErrorContext,
    StorageErrorContext,
    ValidationErrorDetail,
)

__all__ = [
    "UNKNOWN_ERROR_MESSAGE",
    "BaseError",
    "ConsistencyError",
    "ConsistencyErrorContext",
    "ErrorContext",
    "ErrorContextData",
    "OwnershipError",
    "OwnershipErrorContext",
    "ProviderError",
    "ProviderErrorContext",
    "StorageError",
    "StorageErrorContext",
    "ValidationError",
    "ValidationErrorDetail",
    "error_message",
    "log_error",
]
