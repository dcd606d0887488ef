"""Unit tests for the error taxonomy and Result type."""

import pytest

from src.core.errors import (
    ConflictError,
    ErrorCategory,
    ErrorCode,
    ErrorSeverity,
    NotFoundError,
    PersistenceError,
    Result,
    ValidationError,
    to_error_response,
)


@pytest.mark.unit
class TestErrorKinds:
    """Tests for the individual error classes."""

    def test_validation_error_carries_reason_and_field(self):
        """Test ValidationError keeps its reason and field."""
        error = ValidationError("title: must not be empty", field="title")

        assert error.reason == "title: must not be empty"
        assert error.field == "title"
        assert error.category == ErrorCategory.VALIDATION
        assert error.code == ErrorCode.ERR_VALIDATION
        assert error.http_status == 400

    def test_validation_error_code_override_is_per_instance(self):
        """Test a code override does not leak to other instances."""
        custom = ValidationError("bad", code=ErrorCode.ERR_INVALID_QUERY)
        plain = ValidationError("bad")

        assert custom.code == ErrorCode.ERR_INVALID_QUERY
        assert plain.code == ErrorCode.ERR_VALIDATION

    def test_not_found_names_the_id(self):
        """Test NotFoundError names the missing id."""
        error = NotFoundError("abc123")

        assert error.task_id == "abc123"
        assert "abc123" in str(error)
        assert error.http_status == 404

    def test_conflict(self):
        """Test ConflictError carries the task id and expected version."""
        error = ConflictError("abc", 3)

        assert error.expected_version == 3
        assert error.http_status == 409
        assert error.severity == ErrorSeverity.MEDIUM

    def test_persistence_error_wraps_cause(self):
        """Test PersistenceError keeps the original exception as its cause."""
        cause = OSError("disk full")
        error = PersistenceError(cause, operation="insert", task_id="t1")

        assert error.cause is cause
        assert error.__cause__ is cause
        assert "insert" in str(error)
        assert "t1" in str(error)
        assert "disk full" in str(error)
        assert error.http_status == 500


@pytest.mark.unit
class TestResult:
    """Tests for Result."""

    def test_success(self):
        """Test a successful Result exposes its value."""
        result = Result.success(5)

        assert result.ok
        assert result.unwrap() == 5

    def test_failure_unwrap_raises(self):
        """Test unwrapping a failed Result raises its error."""
        result = Result.failure(NotFoundError("x"))

        assert not result.ok
        with pytest.raises(NotFoundError):
            result.unwrap()

    def test_falsy_value_is_still_success(self):
        """Test a falsy value does not make a Result a failure."""
        result = Result.success(0)

        assert result.ok
        assert result.unwrap() == 0


@pytest.mark.unit
class TestToErrorResponse:
    """Tests for to_error_response."""

    def test_validation_response(self):
        """Test a validation error maps to a 400-style response body."""
        response = to_error_response(ValidationError("Unknown sort key 'x'", code=ErrorCode.ERR_INVALID_QUERY))

        assert response.code == ErrorCode.ERR_INVALID_QUERY
        assert response.message == "Unknown sort key 'x'"
        assert response.category == "validation"
        assert response.severity == ErrorSeverity.LOW

    def test_persistence_response_hides_cause(self):
        """Test the response for a storage failure hides the cause."""
        error = PersistenceError(RuntimeError("password=hunter2"), operation="find")

        response = to_error_response(error)

        assert "hunter2" not in response.message
        assert "find" in response.message
        assert response.severity == ErrorSeverity.HIGH
