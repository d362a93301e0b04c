"""
Configuration parsing.

Turns a raw JSON-shaped configuration into a validated FormConfiguration
and checks the structural invariants pydantic cannot express on a single
element: unique field names and non-colliding paths.

Structural problems raise ConfigurationError. References that merely look
wrong (a rule or dependsOn naming an unknown field, an unknown rule
operator) are logged as warnings and left alone.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import ValidationError

from dynaform.config import get_config
from dynaform.errors import ConfigurationError
from dynaform.logic.evaluator import collect_rule_vars, collect_unknown_operators
from dynaform.models.elements import (
    BaseFieldElement,
    FIELD_TYPES,
    FormConfiguration,
)
from dynaform.paths import create_nested_structure
from dynaform.tree import iter_elements

logger = logging.getLogger("dynaform.parser")

_ELEMENT_TAGS = frozenset(FIELD_TYPES) | {"container", "column"}


@dataclass
class ParseResult:
    """Outcome of safe_parse_configuration."""

    success: bool
    data: FormConfiguration | None = None
    error: ConfigurationError | None = None


def format_location(loc: tuple) -> str:
    """
    Render a pydantic error location as an element path.

    Union tags pydantic inserts after list indexes are dropped:
    ("elements", 0, "container", "columns", 1, "column", "width")
    becomes "elements[0].columns[1].width".
    """
    parts: list[str] = []
    previous_was_index = False
    for part in loc:
        if isinstance(part, int):
            if parts:
                parts[-1] = f"{parts[-1]}[{part}]"
            else:
                parts.append(f"[{part}]")
            previous_was_index = True
            continue
        if previous_was_index and part in _ELEMENT_TAGS:
            previous_was_index = False
            continue
        parts.append(str(part))
        previous_was_index = False
    return ".".join(parts)


def _from_validation_error(error: ValidationError) -> ConfigurationError:
    details = error.errors()
    first = details[0]
    message = first["msg"]
    if len(details) > 1:
        message = f"{message} (and {len(details) - 1} more problem(s))"
    return ConfigurationError(message, path=format_location(first["loc"]) or None)


def check_structure(config: FormConfiguration) -> None:
    """
    Enforce unique field names and collision-free paths.

    Raises:
        ConfigurationError: Naming the element location of the offending field.
    """
    locations: dict[str, str] = {}
    for location, element in iter_elements(config.elements):
        if not isinstance(element, BaseFieldElement):
            continue
        if element.name in locations:
            raise ConfigurationError(
                f"duplicate field name '{element.name}' (first defined at {locations[element.name]})",
                path=location,
            )
        locations[element.name] = location

    try:
        create_nested_structure(locations)
    except ConfigurationError as e:
        raise ConfigurationError(e.message, path=locations.get(e.path, e.path)) from e


def _is_known_path(path: str, names: set[str]) -> bool:
    if path in names:
        return True
    prefix = f"{path}."
    return any(name.startswith(prefix) for name in names)


def lint_references(config: FormConfiguration) -> list[str]:
    """
    Log a warning for every reference that cannot resolve.

    Returns:
        The warning messages, in tree order.
    """
    elements = list(iter_elements(config.elements))
    names = {element.name for _, element in elements if isinstance(element, BaseFieldElement)}
    warnings: list[str] = []

    for location, element in elements:
        rules = [("visible", getattr(element, "visible", None))]
        if isinstance(element, BaseFieldElement):
            if element.validation is not None:
                rules.append(("validation.condition", element.validation.condition))
            if element.depends_on is not None and element.depends_on not in names:
                warnings.append(f"{location}: dependsOn references unknown field '{element.depends_on}'")

        for label, rule in rules:
            if rule is None:
                continue
            for path in collect_rule_vars(rule):
                if not _is_known_path(path, names):
                    warnings.append(f"{location}.{label}: rule references unknown field '{path}'")
            for op in collect_unknown_operators(rule):
                warnings.append(f"{location}.{label}: unknown rule operator '{op}' evaluates as undefined")

    for message in warnings:
        logger.warning(message)
    return warnings


def parse_configuration(raw: FormConfiguration | Mapping[str, Any]) -> FormConfiguration:
    """
    Parse and validate a form configuration.

    Args:
        raw: JSON-shaped mapping, or an already parsed FormConfiguration.

    Returns:
        The validated FormConfiguration. The input is not modified.

    Raises:
        ConfigurationError: If the configuration is malformed.

    Example:
        >>> config = parse_configuration({"elements": [{"type": "text", "name": "source.name"}]})
        >>> config.elements[0].name
        'source.name'
    """
    if isinstance(raw, FormConfiguration):
        config = raw
    elif isinstance(raw, Mapping):
        try:
            config = FormConfiguration.model_validate(raw)
        except ValidationError as e:
            raise _from_validation_error(e) from e
    else:
        raise ConfigurationError(
            f"configuration must be an object with an 'elements' list, got {type(raw).__name__}"
        )

    check_structure(config)
    if get_config().warn_on_unknown_references:
        lint_references(config)
    return config


def safe_parse_configuration(raw: Any) -> ParseResult:
    """Like parse_configuration, but reports failure in the result instead of raising."""
    try:
        return ParseResult(success=True, data=parse_configuration(raw))
    except ConfigurationError as e:
        return ParseResult(success=False, error=e)
