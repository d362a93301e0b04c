"""
Whole-form schema synthesis.

generate_schema() flattens the configuration, builds one FieldSchema per
field, installs each at its dot path in a nested shape, and compiles the
shape into a pydantic model. The schema is built once per configuration;
visibility is applied at validation time by the resolver, never by
regenerating the schema.

Example:
    >>> schema = generate_schema({
    ...     "elements": [
    ...         {"type": "text", "name": "source.name", "validation": {"required": True}},
    ...         {"type": "email", "name": "source.email"},
    ...         {"type": "boolean", "name": "active"},
    ...     ]
    ... })
    >>> schema.validate({"source": {"name": "John", "email": "john@example.com"}, "active": True}).is_valid
    True
"""

import copy
import re
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from dynaform.models.elements import FormConfiguration
from dynaform.models.validation_result import FieldValidationError, ValidationResult
from dynaform.parser.config_parser import check_structure, parse_configuration
from dynaform.paths import NestedShape, expand_dotted_keys, iter_leaf_paths, set_nested_schema
from dynaform.schema.field_schemas import REQUIRED_MESSAGE, FieldSchema, build_field_schema
from dynaform.tree import flatten_fields
from dynaform.logic import Rule

DEFAULT_MODEL_NAME = "DynamicForm"


class GeneratedSchema:
    """
    Whole-form validator built from a configuration.

    Attributes:
        model: The compiled pydantic model class.
        shape: Nested shape of FieldSchema leaves, keyed by path segment.
        conditions: Field path -> validation condition rule, for fields
            whose validation only applies conditionally.
    """

    def __init__(
        self,
        model: type[BaseModel],
        shape: NestedShape,
        conditions: dict[str, Rule] | None = None,
    ):
        self.model = model
        self.shape = shape
        self.conditions = conditions or {}

    def validate(self, values: Any) -> ValidationResult:
        """
        Validate form data.

        Accepts nested data or flat dotted keys ({"source.name": ...}).
        Errors are keyed by dot path.
        """
        data = expand_dotted_keys(values) if isinstance(values, Mapping) else values
        try:
            instance = self.model.model_validate(data)
        except ValidationError as e:
            return validation_result_from_error(e)
        return ValidationResult(
            is_valid=True,
            validated_data=instance.model_dump(by_alias=True),
        )

    def normalize(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """
        Shape data like a successful validate() would, without checking it.

        Unknown root keys are dropped, nested levels keep theirs, and absent
        optional fields get their defaults. Values are not coerced.
        """
        return _normalize(self.shape, expand_dotted_keys(values), keep_extra=False)

    def field_paths(self) -> list[str]:
        """Dot paths of every field in the schema."""
        return list(iter_leaf_paths(self.shape))

    def to_json_schema(self) -> dict[str, Any]:
        """Export as JSON Schema dict."""
        return self.model.model_json_schema(by_alias=True)

    def __repr__(self) -> str:
        return f"GeneratedSchema(model={self.model.__name__}, fields={self.field_paths()})"


def validation_result_from_error(error: ValidationError) -> ValidationResult:
    """Convert a pydantic ValidationError into a ValidationResult keyed by dot path."""
    errors = []
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"])
        message = REQUIRED_MESSAGE if item["type"] == "missing" else item["msg"]
        errors.append(
            FieldValidationError(
                path=path,
                error_type=item["type"],
                message=message,
                received=item.get("input") if item["type"] != "missing" else None,
            )
        )
    return ValidationResult(is_valid=False, errors=errors)


def _all_optional(shape: NestedShape) -> bool:
    for entry in shape.values():
        if isinstance(entry, dict):
            if not _all_optional(entry):
                return False
        elif entry.required:
            return False
    return True


def _normalize(shape: NestedShape, data: Mapping[str, Any], keep_extra: bool) -> dict[str, Any]:
    result: dict[str, Any] = dict(data) if keep_extra else {}
    for key, entry in shape.items():
        if isinstance(entry, dict):
            nested = data.get(key)
            if isinstance(nested, Mapping):
                result[key] = _normalize(entry, nested, keep_extra=True)
            elif key in data:
                result[key] = nested
            elif _all_optional(entry):
                result[key] = _normalize(entry, {}, keep_extra=True)
        elif key in data:
            result[key] = data[key]
        elif isinstance(entry, FieldSchema) and not entry.required:
            result[key] = copy.deepcopy(entry.default)
    return result


def _model_name(name: str | None) -> str:
    if not name:
        return DEFAULT_MODEL_NAME
    words = re.split(r"[^0-9a-zA-Z]+", name)
    candidate = "".join(word[:1].upper() + word[1:] for word in words if word)
    if not candidate or candidate[0].isdigit():
        return DEFAULT_MODEL_NAME
    return candidate


def compile_shape(
    shape: NestedShape,
    model_name: str = DEFAULT_MODEL_NAME,
    extra: str = "ignore",
) -> type[BaseModel]:
    """
    Compile a nested shape into a pydantic model.

    Path segments become field aliases, so any segment is usable as a key
    regardless of Python identifier rules. Nested levels allow (and keep)
    unknown keys; the root level follows `extra`.
    """
    definitions: dict[str, Any] = {}
    for index, (key, entry) in enumerate(shape.items()):
        attribute = f"field_{index}"
        if isinstance(entry, dict):
            nested = compile_shape(entry, f"{model_name}_{index}", extra="allow")
            if _all_optional(entry):
                field_info = Field(default_factory=dict, validate_default=True, alias=key, title=key)
            else:
                field_info = Field(..., alias=key, title=key)
            definitions[attribute] = (nested, field_info)
        elif isinstance(entry, FieldSchema):
            if entry.required:
                field_info = Field(..., alias=key, title=key)
            else:
                field_info = Field(default=entry.default, alias=key, title=key)
            definitions[attribute] = (entry.annotation, field_info)
        else:
            definitions[attribute] = (Any, Field(default=None, alias=key, title=key))

    return create_model(
        model_name,
        __config__=ConfigDict(extra=extra),
        **definitions,
    )


def generate_schema(config: FormConfiguration | Mapping[str, Any]) -> GeneratedSchema:
    """
    Generate the whole-form schema for a configuration.

    Args:
        config: Parsed configuration or its raw JSON-shaped mapping.

    Returns:
        GeneratedSchema wrapping the compiled model.

    Raises:
        ConfigurationError: If the configuration is structurally invalid,
            e.g. two field paths collide.
    """
    if isinstance(config, FormConfiguration):
        # Structural checks only; reference linting belongs to parse_configuration.
        check_structure(config)
    else:
        config = parse_configuration(config)

    shape: NestedShape = {}
    conditions: dict[str, Rule] = {}
    for field in flatten_fields(config.elements):
        set_nested_schema(shape, field.name, build_field_schema(field))
        if field.validation is not None and field.validation.condition is not None:
            conditions[field.name] = field.validation.condition

    model = compile_shape(shape, _model_name(config.id))
    return GeneratedSchema(model=model, shape=shape, conditions=conditions)


def get_schema_field_paths(schema: GeneratedSchema) -> list[str]:
    return schema.field_paths()
