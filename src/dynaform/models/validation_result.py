"""
Validation result models for form data validation.

These models represent the output of a whole-form validator.
"""

from typing import Any

from pydantic import BaseModel, Field


class FieldValidationError(BaseModel):
    """Validation error for a specific field."""

    path: str = Field(..., description="Dot-notation path of the field with the error")
    error_type: str = Field(..., description="Type of validation error")
    message: str = Field(..., description="Human-readable error message")
    received: Any | None = Field(default=None, description="Received value")


class ValidationResult(BaseModel):
    """Result of form validation."""

    is_valid: bool = Field(..., description="Whether the form data is valid")
    errors: list[FieldValidationError] = Field(
        default_factory=list, description="List of validation errors"
    )
    validated_data: dict[str, Any] | None = Field(
        default=None, description="Cleaned/validated data if valid"
    )

    @property
    def error_count(self) -> int:
        """Get the number of validation errors."""
        return len(self.errors)

    def get_field_errors(self, path: str) -> list[FieldValidationError]:
        """Get all errors for a specific field."""
        return [e for e in self.errors if e.path == path]

    def to_error_dict(self) -> dict[str, list[str]]:
        """Convert errors to a dict mapping field paths to error messages."""
        result: dict[str, list[str]] = {}
        for error in self.errors:
            if error.path not in result:
                result[error.path] = []
            result[error.path].append(error.message)
        return result

    def first_errors(self) -> dict[str, FieldValidationError]:
        """Keep only the first error reported for each path."""
        result: dict[str, FieldValidationError] = {}
        for error in self.errors:
            result.setdefault(error.path, error)
        return result
