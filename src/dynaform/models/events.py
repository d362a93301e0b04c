"""
Models exchanged with the host form-state mechanism.
"""

from typing import Any

from pydantic import BaseModel, Field

from dynaform.models.validation_result import FieldValidationError


class ResolverResult(BaseModel):
    """What a resolver hands back to the host: values on success, errors otherwise."""

    values: dict[str, Any] = Field(default_factory=dict, description="Validated values (empty when errors remain)")
    errors: dict[str, FieldValidationError] = Field(
        default_factory=dict, description="First error per field path"
    )

    @property
    def is_valid(self) -> bool:
        return not self.errors


class ValuesChangedResult(BaseModel):
    """Outcome of one value-change event."""

    visibility: dict[str, bool] = Field(default_factory=dict, description="Visibility of every field")
    changed: set[str] = Field(default_factory=set, description="Field paths whose visibility flipped")
    resets: dict[str, Any] = Field(
        default_factory=dict,
        description="Dependent field paths reset to their defaults, in application order",
    )
