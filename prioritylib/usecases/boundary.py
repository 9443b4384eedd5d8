"""Exception boundary shared by every use-case method."""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from prioritylib.core.errors.errors import (
    UNKNOWN_ERROR_MESSAGE,
    BaseError,
    OwnershipError,
    ValidationError,
    log_error,
)
from prioritylib.usecases.models import UseCaseResult

logger = logging.getLogger(__name__)

F = TypeVar('F', bound=Callable[..., Awaitable[UseCaseResult[Any]]])


def use_case(operation: str) -> Callable[[F], F]:
    """Turn every exception escaping ``operation`` into a failed result.

    Library errors keep their message. Anything else is logged with its
    traceback and reported as "Unknown error occurred".
    """
    def decorator(method: F) -> F:
        @functools.wraps(method)
        async def wrapper(*args: Any, **kwargs: Any) -> UseCaseResult[Any]:
            try:
                return await method(*args, **kwargs)
            except (ValidationError, OwnershipError) as e:
                log_error(e, logging.WARNING)
                return UseCaseResult.fail(e.message)
            except BaseError as e:
                log_error(e)
                return UseCaseResult.fail(e.message)
            except Exception as e:
                logger.exception(f"Unexpected error in {operation}: {e}")
                return UseCaseResult.fail(UNKNOWN_ERROR_MESSAGE)

        wrapper.__use_case__ = operation  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    return decorator
