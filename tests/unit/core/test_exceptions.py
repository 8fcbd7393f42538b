"""Tests for the service error types."""

import pytest

from user_service.core.exceptions import (
    CacheUnavailableError,
    DependencyUnavailableError,
    DuplicateKeyError,
    InvalidInputError,
    RecordNotFoundError,
    UserServiceError,
)


@pytest.mark.parametrize(
    ("error", "status_code", "kind"),
    [
        (RecordNotFoundError(7), 404, "not_found"),
        (DuplicateKeyError("a@x.com"), 409, "conflict"),
        (InvalidInputError("limit must be greater than or equal to 1"), 400, "invalid_input"),
        (DependencyUnavailableError("database"), 503, "dependency_unavailable"),
        (CacheUnavailableError("get"), 503, "dependency_unavailable"),
    ],
)
def test_error_mapping(error, status_code, kind):
    assert isinstance(error, UserServiceError)
    assert error.status_code == status_code
    assert error.error == kind


def test_messages():
    assert RecordNotFoundError(7).message == "User with id 7 not found"
    assert DuplicateKeyError("a@x.com").message == "User with email a@x.com already exists"
    assert DependencyUnavailableError("database", "timeout").message == (
        "database unavailable: timeout"
    )
    assert CacheUnavailableError("set", "refused").message == "cache unavailable: set failed: refused"


def test_invalid_input_keeps_details():
    error = InvalidInputError(["email: invalid", "phone: invalid"])

    assert error.details == ["email: invalid", "phone: invalid"]
    assert error.message == "Invalid input"
