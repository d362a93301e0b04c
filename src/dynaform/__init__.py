"""
dynaform: Declarative forms with conditional logic.

Describe a form as a tree of fields, containers and columns. dynaform
derives a validation schema for the nested data the form produces, and
keeps field visibility and dependent-field resets in step with the form's
current values.

Simple Usage:
    from dynaform import generate_schema

    schema = generate_schema({
        "elements": [
            {"type": "text", "name": "source.name", "validation": {"required": True}},
            {"type": "email", "name": "source.email"},
        ]
    })

    result = schema.validate({"source.name": "John", "source.email": "john@example.com"})
    result.validated_data  # {"source": {"name": "John", "email": "john@example.com"}}

Advanced Usage:
    from dynaform import FormEngine

    engine = FormEngine(
        config,
        invisible_field_validation="skip",  # hidden fields never block submission
    )

    # Feed value changes; visibility and dependent resets follow
    result = engine.set_value("contact.method", "phone")
    result.changed   # fields whose visibility flipped
    result.resets    # dependent fields reset to their defaults

    # Validate the current values
    outcome = engine.validate()

Rules:
    from dynaform import evaluate

    evaluate({"and": [{"var": "age"}, {">=": [{"var": "age"}, 18]}]}, {"age": 21})  # True
"""

from dynaform.form import (
    FormEngine,
    create_form_engine,
)
from dynaform.errors import (
    ComponentNotFoundError,
    ConfigurationError,
)
from dynaform.models.elements import (
    ColumnElement,
    ContainerElement,
    CustomFieldElement,
    FormConfiguration,
    ValidationConfig,
)
from dynaform.models.events import (
    ResolverResult,
    ValuesChangedResult,
)
from dynaform.models.validation_result import (
    FieldValidationError,
    ValidationResult,
)
from dynaform.parser import (
    CustomComponentDefinition,
    CustomComponentRegistry,
    define_custom_component,
    parse_configuration,
    safe_parse_configuration,
    validate_custom_components,
)
from dynaform.schema import (
    GeneratedSchema,
    build_field_schema,
    create_nested_structure,
    generate_schema,
    get_nested_schema,
    get_schema_field_paths,
    is_field_optional,
    set_nested_schema,
)
from dynaform.logic import (
    evaluate,
    evaluate_condition,
)
from dynaform.engine import (
    build_dependency_map,
    calculate_visibility,
    create_visibility_aware_resolver,
    get_updated_visibility,
)
from dynaform.tree import (
    find_field_by_name,
    flatten_fields,
    get_field_default,
    get_field_names,
    merge_defaults,
)
from dynaform.paths import (
    get_nested_value,
    set_nested_value,
)

__all__ = [
    # Main interface
    "FormEngine",
    "create_form_engine",
    # Errors
    "ComponentNotFoundError",
    "ConfigurationError",
    # Configuration models
    "ColumnElement",
    "ContainerElement",
    "CustomFieldElement",
    "FormConfiguration",
    "ValidationConfig",
    # Results
    "FieldValidationError",
    "ResolverResult",
    "ValidationResult",
    "ValuesChangedResult",
    # Parsing & custom components
    "CustomComponentDefinition",
    "CustomComponentRegistry",
    "define_custom_component",
    "parse_configuration",
    "safe_parse_configuration",
    "validate_custom_components",
    # Schema
    "GeneratedSchema",
    "build_field_schema",
    "create_nested_structure",
    "generate_schema",
    "get_nested_schema",
    "get_schema_field_paths",
    "is_field_optional",
    "set_nested_schema",
    # Rules
    "evaluate",
    "evaluate_condition",
    # Engine
    "build_dependency_map",
    "calculate_visibility",
    "create_visibility_aware_resolver",
    "get_updated_visibility",
    # Utilities
    "find_field_by_name",
    "flatten_fields",
    "get_field_default",
    "get_field_names",
    "merge_defaults",
    "get_nested_value",
    "set_nested_value",
]

__version__ = "0.1.0"
