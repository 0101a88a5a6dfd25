"""Typed success and failure results.

Every public storage operation returns ``Ok`` or ``Err`` instead of
raising for expected failures. Batch callers can collect partial
failures without wrapping each call in ``try``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar, Union

from core.errors import ErrorCode, ResultUnwrapError

T = TypeVar("T")


@dataclass(frozen=True)
class StorageError:
    """Structured failure details.

    Attributes:
        code: Stable machine-readable error code.
        message: Human-readable description.
        cause: Original exception when the failure wraps one.
    """

    code: ErrorCode
    message: str
    cause: BaseException | None = None


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful result carrying a value."""

    value: T

    @property
    def ok(self) -> Literal[True]:
        return True

    def unwrap(self) -> T:
        """Return the carried value."""
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed result carrying a ``StorageError``."""

    error: StorageError

    @property
    def ok(self) -> Literal[False]:
        return False

    def unwrap(self) -> None:
        """Raise because failed results carry no value.

        Raises:
            ResultUnwrapError: Always.
        """
        raise ResultUnwrapError(
            f"Cannot unwrap failed result: {self.error.code.value}: {self.error.message}"
        )


Result = Union[Ok[T], Err]


def ok(value: T) -> Ok[T]:
    """Build a successful result."""
    return Ok(value)


def err(code: ErrorCode, message: str, cause: BaseException | None = None) -> Err:
    """Build a failed result.

    Args:
        code: Error code.
        message: Human-readable message.
        cause: Optional underlying exception.

    Returns:
        Failed result.
    """
    return Err(StorageError(code=code, message=message, cause=cause))
