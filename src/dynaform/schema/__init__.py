"""
Schema synthesis: one validator per field, composed into a nested
whole-form pydantic model.
"""

from dynaform.paths import (
    create_nested_structure,
    get_nested_schema,
    set_nested_schema,
)
from dynaform.schema.field_schemas import (
    FieldSchema,
    apply_validation_rules,
    build_base_type,
    build_field_schema,
    is_field_optional,
)
from dynaform.schema.generate import (
    GeneratedSchema,
    compile_shape,
    generate_schema,
    get_schema_field_paths,
    validation_result_from_error,
)

__all__ = [
    # Nested paths
    "create_nested_structure",
    "get_nested_schema",
    "set_nested_schema",
    # Field schemas
    "FieldSchema",
    "apply_validation_rules",
    "build_base_type",
    "build_field_schema",
    "is_field_optional",
    # Whole-form schema
    "GeneratedSchema",
    "compile_shape",
    "generate_schema",
    "get_schema_field_paths",
    "validation_result_from_error",
]
