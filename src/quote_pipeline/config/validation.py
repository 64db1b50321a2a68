"""Settings validation errors."""

from typing import Any


class ConfigValidationError(ValueError):
    """Raised when pipeline settings fail validation."""

    def __init__(
        self, field: str, value: Any, message: str, suggestion: str | None = None
    ) -> None:
        """Initialize settings validation error.

        Args:
            field: The settings field that failed validation
            value: The invalid value
            message: Human-readable error message
            suggestion: Optional suggestion for fixing the error
        """
        self.field = field
        self.value = value
        self.message = message
        self.suggestion = suggestion

        error_msg = f"Settings validation failed for '{field}': {message}"
        if suggestion:
            error_msg += f"\nSuggestion: {suggestion}"

        super().__init__(error_msg)
