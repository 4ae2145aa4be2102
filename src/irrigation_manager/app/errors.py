"""Error types for irrigation-app.

Services raise these; the app turns them into user-visible notifications
through a single handler (see IrrigationApp.report_error).
"""

from typing import Optional


class IrrigationError(Exception):
    """Base class for all irrigation-app errors."""


class ValidationError(IrrigationError):
    """User input is missing or malformed."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class StoreError(IrrigationError):
    """Error communicating with the section store."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SectionNotFoundError(IrrigationError):
    """A section id is not present in the loaded section list."""

    def __init__(self, section_id: str):
        super().__init__(f"Section not found: {section_id}")
        self.section_id = section_id


def describe_error(error: BaseException) -> tuple[str, str]:
    """Map an exception to a notification message and severity.

    Args:
        error: Exception raised by a service call

    Returns:
        Tuple of (message, severity) where severity is a Textual
        notification severity ("information", "warning" or "error")
    """
    if isinstance(error, ValidationError):
        return str(error), "warning"
    if isinstance(error, StoreError):
        if error.status_code is not None:
            return f"Database error ({error.status_code}): {error}", "error"
        return f"Database error: {error}", "error"
    if isinstance(error, SectionNotFoundError):
        return str(error), "warning"
    return f"Unexpected error: {error}", "error"
