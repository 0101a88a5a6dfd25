"""Unit tests for typed results."""

from __future__ import annotations

import pytest

from core.errors import ErrorCode, ResultUnwrapError
from core.result import Err, Ok, err, ok


def test_ok_carries_value() -> None:
    """Successful results should expose their value."""
    result = ok(3)

    assert isinstance(result, Ok) and result.ok and result.unwrap() == 3


def test_err_carries_code_message_and_cause() -> None:
    """Failed results should expose structured error details."""
    cause = RuntimeError("boom")

    result = err(ErrorCode.BUCKET_ERROR, "bucket down", cause)

    assert isinstance(result, Err)
    assert not result.ok
    assert (result.error.code, result.error.message, result.error.cause) == (
        ErrorCode.BUCKET_ERROR,
        "bucket down",
        cause,
    )


def test_err_unwrap_raises() -> None:
    """Unwrapping a failed result should raise."""
    result = err(ErrorCode.NOT_FOUND, "missing")

    with pytest.raises(ResultUnwrapError, match="NOT_FOUND"):
        result.unwrap()


def test_error_codes_are_plain_strings() -> None:
    """Error codes should compare equal to their string names."""
    assert ErrorCode.INVALID_KEY == "INVALID_KEY"
