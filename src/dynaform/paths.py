"""
Dot-notation path helpers.

A *shape* is a nested dict mapping path segments either to a leaf
validator or to another dict (a nested object level). Field "source.name"
ends up as ``{"source": {"name": <validator>}}``. Nested levels become open
objects when the shape is compiled, so data with extra keys at those
levels is accepted.

The same traversal is used for form values (get_nested_value /
set_nested_value), so rules and schemas agree on what a path means.
"""

from typing import Any, Iterable, Mapping

from dynaform.errors import ConfigurationError

NestedShape = dict[str, Any]

PATH_SEPARATOR = "."


def split_path(path: str) -> list[str]:
    return path.split(PATH_SEPARATOR)


def set_nested_schema(shape: NestedShape, path: str, validator: Any) -> None:
    """
    Install a leaf validator at a dot-notation path, creating nested levels.

    Args:
        shape: Mutable nested shape to write into.
        path: Dot-notation path, e.g. "source.name".
        validator: Leaf validator for the path.

    Raises:
        ConfigurationError: If the path collides with an existing field,
            either by descending through a leaf or by landing on a level
            that already holds nested fields.

    Example:
        >>> shape = {}
        >>> set_nested_schema(shape, "source.name", "v")
        >>> shape
        {'source': {'name': 'v'}}
    """
    segments = split_path(path)
    current = shape

    for depth, segment in enumerate(segments[:-1]):
        if segment not in current:
            current[segment] = {}
        elif not isinstance(current[segment], dict):
            parent = PATH_SEPARATOR.join(segments[: depth + 1])
            raise ConfigurationError(
                f"field '{path}' cannot be nested under field '{parent}'",
                path=path,
            )
        current = current[segment]

    leaf = segments[-1]
    if leaf in current:
        if isinstance(current[leaf], dict):
            raise ConfigurationError(
                f"field '{path}' collides with nested fields below it",
                path=path,
            )
        raise ConfigurationError(f"duplicate field '{path}'", path=path)

    current[leaf] = validator


def get_nested_schema(shape: Mapping[str, Any], path: str) -> Any | None:
    """Look up the entry at a path; None if any segment is missing."""
    current: Any = shape
    for segment in split_path(path):
        if not isinstance(current, Mapping) or segment not in current:
            return None
        current = current[segment]
    return current


def create_nested_structure(paths: Iterable[str]) -> NestedShape:
    """
    Build a nested skeleton from paths alone, with None at every leaf.

    Raises:
        ConfigurationError: On the same collisions as set_nested_schema.
    """
    structure: NestedShape = {}
    for path in paths:
        set_nested_schema(structure, path, None)
    return structure


def iter_leaf_paths(shape: Mapping[str, Any], prefix: str = "") -> Iterable[str]:
    """Yield the dot path of every leaf in a shape, in insertion order."""
    for key, entry in shape.items():
        full_path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key
        if isinstance(entry, dict):
            yield from iter_leaf_paths(entry, full_path)
        else:
            yield full_path


def get_nested_value(data: Any, path: str, default: Any = None) -> Any:
    """
    Read a value at a dot-notation path.

    Numeric segments index into lists. Returns `default` when the path
    does not resolve.
    """
    current = data
    for segment in split_path(path):
        if isinstance(current, Mapping):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, (list, tuple)) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return default
            current = current[index]
        else:
            return default
    return current


def set_nested_value(data: Mapping[str, Any], path: str, value: Any) -> dict[str, Any]:
    """
    Return a copy of `data` with `value` stored at `path`.

    Only the levels along the path are copied; the input is left untouched.
    Non-mapping values found along the path are replaced by new levels.
    """
    segments = split_path(path)
    result = dict(data)
    current = result
    for segment in segments[:-1]:
        existing = current.get(segment)
        child = dict(existing) if isinstance(existing, Mapping) else {}
        current[segment] = child
        current = child
    current[segments[-1]] = value
    return result


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings into a new dict; `override` wins on conflicts."""
    merged = dict(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = value
    return merged


def expand_dotted_keys(values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Turn flat dotted keys into nested objects.

    Example:
        >>> expand_dotted_keys({"source.name": "Jo", "active": True})
        {'source': {'name': 'Jo'}, 'active': True}
    """
    expanded: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(key, str) and PATH_SEPARATOR in key:
            fragment = set_nested_value({}, key, value)
        else:
            fragment = {key: value}
        expanded = deep_merge(expanded, fragment)
    return expanded
