"""
Visibility-aware validation resolver.

Wraps any whole-form validator so that errors from hidden fields are
handled according to the invisible-field policy, and errors from fields
whose validation condition is inactive are dropped altogether.

Policies for errors of invisible fields:
    - skip: drop them (hidden fields cannot block submission)
    - validate: keep them
    - warn: keep them and log a warning
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError

from dynaform.config import INVISIBLE_FIELD_VALIDATION_MODES, InvisibleFieldValidation, get_config
from dynaform.logic.evaluator import evaluate_condition
from dynaform.models.elements import Rule
from dynaform.models.events import ResolverResult
from dynaform.models.validation_result import ValidationResult
from dynaform.paths import expand_dotted_keys
from dynaform.schema.generate import validation_result_from_error

logger = logging.getLogger("dynaform.resolver")

Resolver = Callable[..., ResolverResult]


@runtime_checkable
class SchemaValidator(Protocol):
    """Anything that validates a whole form and reports errors keyed by dot path."""

    def validate(self, values: Any) -> ValidationResult: ...


class PydanticValidator:
    """Adapts a pydantic model class or TypeAdapter to SchemaValidator."""

    def __init__(self, target: type[BaseModel] | TypeAdapter):
        self.target = target

    def validate(self, values: Any) -> ValidationResult:
        try:
            if isinstance(self.target, TypeAdapter):
                parsed = self.target.validate_python(values)
                data = self.target.dump_python(parsed, by_alias=True)
            else:
                data = self.target.model_validate(values).model_dump(by_alias=True)
        except ValidationError as e:
            return validation_result_from_error(e)
        return ValidationResult(is_valid=True, validated_data=data)


def as_validator(schema: Any) -> SchemaValidator:
    """
    Normalise a schema into a SchemaValidator.

    Accepts a GeneratedSchema, a pydantic model class, a TypeAdapter, or
    any object with a ``validate(values) -> ValidationResult`` method.

    Raises:
        TypeError: For anything else.
    """
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return PydanticValidator(schema)
    if isinstance(schema, TypeAdapter):
        return PydanticValidator(schema)
    if callable(getattr(schema, "validate", None)):
        return schema
    raise TypeError(f"Cannot use {type(schema).__name__} as a form validator")


def _descendants(path: str, paths: Iterable[str]) -> list[str]:
    prefix = f"{path}."
    return [candidate for candidate in paths if candidate.startswith(prefix)]


def is_path_hidden(path: str, visibility: Mapping[str, bool]) -> bool:
    """
    Whether an error path belongs to hidden fields.

    A field path uses its own entry. A nested-object path is hidden only
    when every field below it is hidden. Unknown paths count as visible.
    """
    if path in visibility:
        return not visibility[path]
    below = _descendants(path, visibility)
    return bool(below) and not any(visibility[candidate] for candidate in below)


def is_condition_active(
    path: str,
    conditions: Mapping[str, Rule],
    values: Mapping[str, Any],
    field_paths: Iterable[str] = (),
) -> bool:
    """
    Whether the validation rules behind an error path currently apply.

    A field without a condition is always active. A nested-object path is
    inactive only when every field below it has an inactive condition.
    """
    if path in conditions:
        return evaluate_condition(conditions[path], values)
    below = _descendants(path, set(field_paths) | set(conditions))
    if not below:
        return True
    return any(
        candidate not in conditions or evaluate_condition(conditions[candidate], values)
        for candidate in below
    )


def create_visibility_aware_resolver(
    schema: Any,
    get_visibility: Callable[[], Mapping[str, bool]],
    invisible_field_validation: InvisibleFieldValidation | None = None,
    conditions: Mapping[str, Rule] | None = None,
) -> Resolver:
    """
    Build a resolver for the host form-state mechanism.

    Args:
        schema: Whole-form validator (see as_validator).
        get_visibility: Returns the current visibility state when called.
        invisible_field_validation: "skip", "validate" or "warn". If None,
            uses config.invisible_field_validation.
        conditions: Field path -> validation condition. Defaults to the
            schema's own `conditions` when it has them; entries given here
            take precedence.

    Returns:
        ``resolver(values, context=None) -> ResolverResult``. `context` is
        accepted for signature compatibility with hosts that pass one.

    Example:
        >>> schema = generate_schema(config)
        >>> resolver = create_visibility_aware_resolver(schema, lambda: engine.visibility)
        >>> resolver({"name": ""}).errors["name"].message
        'This field is required'
    """
    mode = invisible_field_validation or get_config().invisible_field_validation
    if mode not in INVISIBLE_FIELD_VALIDATION_MODES:
        raise ValueError(
            f"invisible_field_validation must be one of "
            f"{', '.join(INVISIBLE_FIELD_VALIDATION_MODES)}; got {mode!r}"
        )

    validator = as_validator(schema)
    active_conditions: dict[str, Rule] = dict(getattr(schema, "conditions", None) or {})
    active_conditions.update(conditions or {})
    field_paths_of = getattr(schema, "field_paths", None)
    field_paths = list(field_paths_of()) if callable(field_paths_of) else []
    normalize = getattr(schema, "normalize", None)

    def resolver(values: Mapping[str, Any], context: Any = None) -> ResolverResult:
        data = expand_dotted_keys(values) if isinstance(values, Mapping) else values
        result = validator.validate(data)
        if result.is_valid:
            return ResolverResult(values=result.validated_data or {}, errors={})

        visibility = get_visibility()
        errors = {}
        for path, error in result.first_errors().items():
            if not is_condition_active(path, active_conditions, data, field_paths):
                continue
            if is_path_hidden(path, visibility):
                if mode == "skip":
                    continue
                if mode == "warn":
                    logger.warning(
                        f"Invisible field '{path}' failed validation: {error.message}"
                    )
            errors[path] = error

        if errors:
            return ResolverResult(values={}, errors=errors)
        # Only hidden or inactive fields failed.
        if not isinstance(data, Mapping):
            return ResolverResult(values={}, errors={})
        if callable(normalize):
            return ResolverResult(values=normalize(data), errors={})
        return ResolverResult(values=dict(data), errors={})

    return resolver
