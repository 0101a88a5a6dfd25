"""Exception to result translation for storage operations.

Key construction and bucket exceptions raised inside a service method
become ``Err`` results at the method boundary, so public operations
never raise for anticipated failures.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

from core.errors import BucketError, ErrorCode, KeyConstructionError
from core.logging_config import get_logger
from core.result import Err, err

_LOGGER = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])


def result_boundary(operation: str) -> Callable[[F], F]:
    """Wrap an async service method so expected faults return ``Err``.

    Args:
        operation: Operation name used in log events.

    Returns:
        Decorator for async methods returning results.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except KeyConstructionError as error:
                return invalid_key(error)
            except BucketError as error:
                return bucket_fault(operation, error)

        return wrapper  # type: ignore[return-value]

    return decorator


def invalid_key(error: KeyConstructionError) -> Err:
    """Map a key construction failure to ``INVALID_KEY``."""
    return err(ErrorCode.INVALID_KEY, str(error), error)


def bucket_fault(operation: str, error: BucketError) -> Err:
    """Log and map a bucket failure to ``BUCKET_ERROR``."""
    _LOGGER.error("bucket_fault", operation=operation, error=str(error))
    return err(ErrorCode.BUCKET_ERROR, f"Bucket operation failed during {operation}: {error}", error)
