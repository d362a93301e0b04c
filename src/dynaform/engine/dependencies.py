"""
Dependency graph and cascading resets.

A field declaring ``dependsOn: "country"`` is reset to its default value
whenever the value at "country" actually changes, unless it sets
``resetOnParentChange: false``. Resets cascade to the dependents of a
reset field when the reset changed its value; each field is handled at
most once per change event, so cyclic declarations terminate.
"""

import copy
import logging
from collections import deque
from typing import Any, Iterable, Mapping

from dynaform.logic.evaluator import strict_equals
from dynaform.models.elements import BaseFieldElement
from dynaform.paths import get_nested_value
from dynaform.tree import flatten_fields, get_field_default

logger = logging.getLogger("dynaform.engine")

DependencyMap = dict[str, set[str]]


def build_dependency_map(elements: Iterable[Any]) -> DependencyMap:
    """
    Map each field path to the set of fields that declare dependsOn it.

    Example:
        >>> from dynaform.parser import parse_configuration
        >>> config = parse_configuration({"elements": [
        ...     {"type": "text", "name": "country"},
        ...     {"type": "text", "name": "region", "dependsOn": "country"},
        ... ]})
        >>> build_dependency_map(config.elements)
        {'country': {'region'}}
    """
    dependency_map: DependencyMap = {}
    for field in flatten_fields(elements):
        if field.depends_on:
            dependency_map.setdefault(field.depends_on, set()).add(field.name)
    return dependency_map


def should_reset_on_parent_change(field: BaseFieldElement) -> bool:
    # Only an explicit false opts out.
    return field.reset_on_parent_change is not False


class DependencyTracker:
    """
    Tracks the last observed value of every dependency parent and plans resets.

    The tracker never writes to form values itself; handle_change returns
    the resets for the host to apply.
    """

    def __init__(
        self,
        elements: Iterable[Any],
        initial_values: Mapping[str, Any] | None = None,
        dependency_map: Mapping[str, Iterable[str]] | None = None,
    ):
        fields = flatten_fields(elements)
        self.dependency_map = dependency_map if dependency_map is not None else build_dependency_map(fields)
        self._fields: dict[str, BaseFieldElement] = {field.name: field for field in fields}
        self._order: dict[str, int] = {field.name: index for index, field in enumerate(fields)}
        self._observed: dict[str, Any] = {}
        self.observe(initial_values or {})

    def observe(self, values: Mapping[str, Any]) -> None:
        """Record the current value of every dependency parent without resetting anything."""
        self._observed = {
            path: copy.deepcopy(get_nested_value(values, path))
            for path in self.dependency_map
        }

    def dependents_of(self, path: str) -> list[str]:
        """Dependents of a path, in document order."""
        return sorted(self.dependency_map.get(path, ()), key=lambda name: self._order.get(name, 0))

    def handle_change(self, changed_path: str, values: Mapping[str, Any]) -> dict[str, Any]:
        """
        Plan the resets triggered by a change at `changed_path`.

        Args:
            changed_path: Path of the field that changed.
            values: Current form values (not modified).

        Returns:
            Ordered mapping of dependent path -> default value to assign.
            Empty when the parent's value did not actually change.
        """
        resets: dict[str, Any] = {}
        visited: set[str] = set()
        queue = deque([changed_path])

        def current_value(path: str) -> Any:
            if path in resets:
                return resets[path]
            return get_nested_value(values, path)

        while queue:
            path = queue.popleft()
            if path in visited:
                continue
            visited.add(path)

            if path not in self.dependency_map:
                continue
            value = current_value(path)
            if path in self._observed and strict_equals(self._observed[path], value):
                continue
            self._observed[path] = copy.deepcopy(value)

            for dependent in self.dependents_of(path):
                field = self._fields.get(dependent)
                if field is None or not should_reset_on_parent_change(field):
                    continue
                if dependent in visited:
                    logger.debug(f"Skipping reset of '{dependent}': already handled in this change")
                    continue
                resets[dependent] = get_field_default(field)
                logger.debug(f"Reset '{dependent}' after change to '{path}'")
                queue.append(dependent)

        return resets
