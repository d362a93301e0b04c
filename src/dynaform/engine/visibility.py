"""
Visibility engine.

Visibility is recomputed from the whole tree on every change and then
diffed against the previous state, so consumers only react to the fields
that actually flipped.
"""

from typing import Any, Iterable, Mapping

from dynaform.logic.evaluator import evaluate_condition
from dynaform.models.elements import BaseFieldElement

VisibilityState = dict[str, bool]


def _walk(
    elements: Iterable[Any],
    values: Mapping[str, Any],
    parent_visible: bool,
    state: VisibilityState,
) -> None:
    for element in elements:
        # Ancestors gate descendants; a hidden ancestor skips the element's own rule.
        visible = parent_visible and evaluate_condition(element.visible, values)
        if isinstance(element, BaseFieldElement):
            state[element.name] = visible
        else:
            _walk(element.iter_children(), values, visible, state)


def calculate_visibility(elements: Iterable[Any], values: Mapping[str, Any] | None) -> VisibilityState:
    """
    Compute visibility for every field in the tree.

    A field is visible unless its own `visible` rule, or that of any
    enclosing container or column, evaluates falsy against `values`.

    Example:
        >>> from dynaform.parser import parse_configuration
        >>> config = parse_configuration({"elements": [
        ...     {"type": "boolean", "name": "more"},
        ...     {"type": "text", "name": "details", "visible": {"var": "more"}},
        ... ]})
        >>> calculate_visibility(config.elements, {"more": False})
        {'more': True, 'details': False}
    """
    state: VisibilityState = {}
    _walk(elements, values or {}, True, state)
    return state


def diff_visibility(previous: Mapping[str, bool], current: Mapping[str, bool]) -> set[str]:
    """Field paths whose visibility differs between two states (including added or removed paths)."""
    changed = {path for path, visible in current.items() if previous.get(path) != visible}
    changed.update(path for path in previous if path not in current)
    return changed


def get_updated_visibility(previous: VisibilityState, current: VisibilityState) -> VisibilityState:
    """
    Merge a freshly computed state into the previous one.

    Returns `previous` itself when no entry changed, so identity can be
    used to skip work; otherwise a new mapping.
    """
    if not diff_visibility(previous, current):
        return previous
    return {**previous, **current}
