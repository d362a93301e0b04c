"""
Element-tree utilities.

Walks the configuration tree through containers (columns and children)
and columns (elements) in document order.
"""

import copy
from typing import Any, Iterable, Iterator, Mapping

from dynaform.models.elements import (
    BaseFieldElement,
    BooleanFieldElement,
    FormConfiguration,
    STRING_FIELD_TYPES,
)
from dynaform.paths import deep_merge, expand_dotted_keys, set_nested_value


def iter_elements(elements: Iterable[Any], base_path: str = "elements") -> Iterator[tuple[str, Any]]:
    """
    Yield (location, element) for every element in the tree, depth first.

    Locations look like "elements[0].columns[1].elements[2]" and are used
    to point at offending elements in configuration errors.
    """
    for index, element in enumerate(elements):
        location = f"{base_path}[{index}]"
        yield location, element
        columns = getattr(element, "columns", None)
        if columns:
            yield from iter_elements(columns, f"{location}.columns")
        children = getattr(element, "children", None)
        if children:
            yield from iter_elements(children, f"{location}.children")
        nested = getattr(element, "elements", None)
        if nested:
            yield from iter_elements(nested, f"{location}.elements")


def flatten_fields(elements: Iterable[Any]) -> list[BaseFieldElement]:
    """
    All field elements in document order; containers and columns are not emitted.

    Example:
        >>> from dynaform.parser import parse_configuration
        >>> config = parse_configuration({"elements": [
        ...     {"type": "container", "columns": [
        ...         {"type": "column", "width": "50%", "elements": [{"type": "text", "name": "a"}]},
        ...     ]},
        ...     {"type": "text", "name": "b"},
        ... ]})
        >>> [f.name for f in flatten_fields(config.elements)]
        ['a', 'b']
    """
    fields: list[BaseFieldElement] = []
    for element in elements:
        if isinstance(element, BaseFieldElement):
            fields.append(element)
        else:
            fields.extend(flatten_fields(element.iter_children()))
    return fields


def get_field_names(elements: Iterable[Any]) -> list[str]:
    return [field.name for field in flatten_fields(elements)]


def find_field_by_name(elements: Iterable[Any], name: str) -> BaseFieldElement | None:
    for field in flatten_fields(elements):
        if field.name == name:
            return field
    return None


def get_field_default(field: BaseFieldElement) -> Any:
    """
    Default value for a field.

    The declared defaultValue wins (copied, so callers may mutate the
    result); otherwise "" for string-like fields, False for booleans and
    None for custom fields.
    """
    if field.default_value is not None:
        return copy.deepcopy(field.default_value)
    if isinstance(field, BooleanFieldElement):
        return False
    if field.type in STRING_FIELD_TYPES:
        return ""
    return None


def build_default_values(elements: Iterable[Any]) -> dict[str, Any]:
    """Nested object holding every field's default value."""
    defaults: dict[str, Any] = {}
    for field in flatten_fields(elements):
        defaults = set_nested_value(defaults, field.name, get_field_default(field))
    return defaults


def merge_defaults(
    config: FormConfiguration,
    initial_data: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Field defaults overlaid with caller-provided initial data.

    Initial data may be nested or use flat dotted keys. Neither input is
    modified.
    """
    defaults = build_default_values(config.elements)
    if not initial_data:
        return defaults
    return deep_merge(defaults, copy.deepcopy(expand_dotted_keys(initial_data)))
