"""Tests for error types and describe_error."""

import pytest

from irrigation_manager.app.errors import (
    IrrigationError,
    SectionNotFoundError,
    StoreError,
    ValidationError,
    describe_error,
)


class TestDescribeError:
    """Tests for mapping errors to notifications."""

    def test_validation_error_is_warning(self):
        message, severity = describe_error(ValidationError("name", "Name is required"))

        assert message == "Name is required"
        assert severity == "warning"

    def test_store_error_with_status(self):
        message, severity = describe_error(StoreError("Permission denied", status_code=403))

        assert message == "Database error (403): Permission denied"
        assert severity == "error"

    def test_store_error_without_status(self):
        message, severity = describe_error(StoreError("Cannot connect"))

        assert message == "Database error: Cannot connect"
        assert severity == "error"

    def test_section_not_found(self):
        message, severity = describe_error(SectionNotFoundError("s9"))

        assert "s9" in message
        assert severity == "warning"

    def test_unexpected_error(self):
        message, severity = describe_error(RuntimeError("boom"))

        assert message == "Unexpected error: boom"
        assert severity == "error"


@pytest.mark.parametrize(
    "error",
    [ValidationError("f", "m"), StoreError("m"), SectionNotFoundError("s")],
)
def test_errors_share_base_class(error):
    assert isinstance(error, IrrigationError)
