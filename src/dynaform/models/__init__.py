"""
Data models for dynaform.

This module contains Pydantic models for:
- Form configuration elements (fields, containers, columns)
- Validation results
- Events exchanged with the host form-state mechanism
"""

from dynaform.models.elements import (
    BaseFieldElement,
    BooleanFieldElement,
    ColumnElement,
    ContainerElement,
    CustomFieldElement,
    DateFieldElement,
    EmailFieldElement,
    FieldElement,
    FormConfiguration,
    FormElement,
    LayoutElement,
    PhoneFieldElement,
    Rule,
    TextFieldElement,
    ValidationConfig,
    is_column_element,
    is_container_element,
    is_custom_field_element,
    is_field_element,
    is_section_container,
)
from dynaform.models.events import (
    ResolverResult,
    ValuesChangedResult,
)
from dynaform.models.validation_result import (
    FieldValidationError,
    ValidationResult,
)

__all__ = [
    # Configuration
    "BaseFieldElement",
    "BooleanFieldElement",
    "ColumnElement",
    "ContainerElement",
    "CustomFieldElement",
    "DateFieldElement",
    "EmailFieldElement",
    "FieldElement",
    "FormConfiguration",
    "FormElement",
    "LayoutElement",
    "PhoneFieldElement",
    "Rule",
    "TextFieldElement",
    "ValidationConfig",
    "is_column_element",
    "is_container_element",
    "is_custom_field_element",
    "is_field_element",
    "is_section_container",
    # Events
    "ResolverResult",
    "ValuesChangedResult",
    # Validation
    "FieldValidationError",
    "ValidationResult",
]
