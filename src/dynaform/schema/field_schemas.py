"""
Per-field validators.

Each field gets a base type chosen by its field type, then the rules of
its ValidationConfig are layered on as pydantic after-validators. The
result is a FieldSchema: the annotation plus what pydantic needs to know
about presence and defaults.
"""

import logging
import re
from dataclasses import dataclass
from typing import Annotated, Any, Callable

from pydantic import AfterValidator, StrictBool, StrictStr
from pydantic_core import PydanticCustomError

from dynaform.logic.evaluator import PATTERN_ERRORS, translate_pattern
from dynaform.models.elements import STRING_FIELD_TYPES, BaseFieldElement, ValidationConfig
from dynaform.tree import get_field_default

logger = logging.getLogger("dynaform.schema")

REQUIRED_MESSAGE = "This field is required"
INVALID_EMAIL_MESSAGE = "Invalid email address"
INVALID_FORMAT_MESSAGE = "Invalid format"

# Structural check only: something@something.tld, no whitespace. Used with fullmatch.
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


@dataclass(frozen=True)
class FieldSchema:
    """
    Leaf validator for one field.

    Attributes:
        annotation: Type (possibly Annotated) pydantic validates against.
        required: Whether the value must be present in submitted data.
        default: Value used when an optional field is absent.
        field_type: The field type the schema was built for.
    """

    annotation: Any
    required: bool
    default: Any = None
    field_type: str = "text"


def _check_email(value: str) -> str:
    # Empty strings are the concern of `required`, not of the email shape.
    if value and not EMAIL_PATTERN.fullmatch(value):
        raise PydanticCustomError("invalid_email", INVALID_EMAIL_MESSAGE)
    return value


def _required_string(value: str) -> str:
    if value == "":
        raise PydanticCustomError("required", REQUIRED_MESSAGE)
    return value


def _required_true(value: bool) -> bool:
    if value is not True:
        raise PydanticCustomError("required", REQUIRED_MESSAGE)
    return value


def _min_length(limit: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value) < limit:
            raise PydanticCustomError(
                "min_length",
                "Must be at least {limit} characters",
                {"limit": limit},
            )
        return value

    return check


def _max_length(limit: int) -> Callable[[str], str]:
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError(
                "max_length",
                "Must be no more than {limit} characters",
                {"limit": limit},
            )
        return value

    return check


def _matches(regex: re.Pattern, message: str) -> Callable[[str], str]:
    def check(value: str) -> str:
        if not regex.search(value):
            raise PydanticCustomError("pattern", message)
        return value

    return check


def build_base_type(field_type: str) -> Any:
    """Base annotation for a field type; unknown and custom types accept anything."""
    if field_type in ("text", "phone", "date"):
        return StrictStr
    if field_type == "email":
        return Annotated[StrictStr, AfterValidator(_check_email)]
    if field_type == "boolean":
        return StrictBool
    return Any


def _string_checks(validation: ValidationConfig, field_name: str) -> list[Callable]:
    checks: list[Callable] = []

    if validation.required:
        checks.append(_required_string)
    if validation.min_length is not None:
        checks.append(_min_length(validation.min_length))
    if validation.max_length is not None:
        checks.append(_max_length(validation.max_length))
    if validation.pattern:
        try:
            regex = re.compile(translate_pattern(validation.pattern))
        except PATTERN_ERRORS as e:
            logger.warning(
                f"Invalid regex pattern for field '{field_name}': {validation.pattern!r} ({e}); "
                "pattern check skipped"
            )
        else:
            checks.append(_matches(regex, validation.message or INVALID_FORMAT_MESSAGE))

    return checks


def apply_validation_rules(
    base: Any,
    validation: ValidationConfig,
    field_type: str,
    field_name: str = "",
) -> Any:
    """
    Layer ValidationConfig rules onto a base annotation.

    Args:
        base: Annotation from build_base_type.
        validation: Rules to apply.
        field_type: Field type, selects which rules are meaningful.
        field_name: Used in log messages only.

    Returns:
        Annotated type running the rules in order: required, minLength,
        maxLength, pattern. Custom and unknown types are returned unchanged.
    """
    if field_type in STRING_FIELD_TYPES:
        checks = _string_checks(validation, field_name)
    elif field_type == "boolean":
        # "Required" on a checkbox means it has to be ticked.
        checks = [_required_true] if validation.required else []
    else:
        checks = []

    annotation = base
    for check in checks:
        annotation = Annotated[annotation, AfterValidator(check)]
    return annotation


def is_field_optional(field: BaseFieldElement) -> bool:
    """A field is optional exactly when its validation has no truthy `required`."""
    return not (field.validation is not None and field.validation.required)


def build_field_schema(field: BaseFieldElement) -> FieldSchema:
    """
    Build the leaf validator for a single field.

    Example:
        >>> from dynaform.models.elements import TextFieldElement
        >>> schema = build_field_schema(TextFieldElement(name="name", validation={"required": True}))
        >>> schema.required
        True
    """
    annotation = build_base_type(field.type)
    if field.validation is not None:
        annotation = apply_validation_rules(annotation, field.validation, field.type, field.name)

    optional = is_field_optional(field)
    return FieldSchema(
        annotation=annotation,
        required=not optional,
        default=get_field_default(field) if optional else None,
        field_type=field.type,
    )
