"""
Form Engine.

This is the main entry point for dynaform. Give it a form configuration
and it keeps the form's visibility and dependent-field resets in step with
the values, and validates submissions with a visibility-aware resolver.
"""

import copy
import logging
from typing import Any, Callable, Mapping

from dynaform.cache import ArtifactCache, default_cache
from dynaform.config import InvisibleFieldValidation
from dynaform.engine.dependencies import DependencyTracker
from dynaform.engine.resolver import Resolver, create_visibility_aware_resolver
from dynaform.engine.visibility import (
    VisibilityState,
    calculate_visibility,
    diff_visibility,
    get_updated_visibility,
)
from dynaform.models.elements import FormConfiguration
from dynaform.models.events import ResolverResult, ValuesChangedResult
from dynaform.parser.config_parser import parse_configuration
from dynaform.parser.custom_components import CustomComponentRegistry, validate_custom_components
from dynaform.paths import get_nested_value, set_nested_value
from dynaform.schema.generate import GeneratedSchema
from dynaform.tree import merge_defaults

logger = logging.getLogger("dynaform.form")

OnChangeHandler = Callable[[dict[str, Any], str], None]


class FormEngine:
    """
    Stateful engine for one form.

    Usage:
        engine = FormEngine({
            "elements": [
                {"type": "text", "name": "country"},
                {"type": "text", "name": "region", "dependsOn": "country"},
                {"type": "text", "name": "vat", "visible": {"==": [{"var": "country"}, "DE"]}},
            ]
        })

        result = engine.set_value("country", "DE")
        result.resets       # {"region": ""}
        engine.visibility   # {"country": True, "region": True, "vat": True}

        engine.validate()   # ResolverResult(values=..., errors=...)

    Hosts with their own value store call on_values_changed() on every
    change and apply the returned resets themselves.
    """

    def __init__(
        self,
        config: FormConfiguration | Mapping[str, Any],
        initial_data: Mapping[str, Any] | None = None,
        schema: Any = None,
        resolver: Resolver | None = None,
        invisible_field_validation: InvisibleFieldValidation | None = None,
        registry: CustomComponentRegistry | None = None,
        on_change: OnChangeHandler | None = None,
        cache: ArtifactCache | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Form configuration, raw or parsed. Never modified.
            initial_data: Values overriding field defaults (nested or dotted keys).
            schema: External whole-form validator to use instead of the
                generated one. It is still wrapped by the visibility-aware resolver.
            resolver: Fully external resolver, used as is.
            invisible_field_validation: "skip", "validate" or "warn". If None,
                uses config.invisible_field_validation.
            registry: Custom component registry. When given, every custom
                element must resolve in it and its props must validate.
            on_change: Called as on_change(values, changed_path) after each set_value.
            cache: Cache for derived artifacts. If None, uses the process-wide cache.

        Raises:
            ConfigurationError: If the configuration is structurally invalid.
        """
        parsed = parse_configuration(config)
        if registry is not None:
            parsed = validate_custom_components(parsed, registry)
        self.config = parsed

        artifacts = (cache if cache is not None else default_cache).get(parsed)
        self.generated_schema: GeneratedSchema = artifacts.schema
        self.dependency_map = artifacts.dependency_map

        self.default_values = merge_defaults(parsed, initial_data)
        self._values: dict[str, Any] = copy.deepcopy(self.default_values)
        self._visibility: VisibilityState = calculate_visibility(parsed.elements, self._values)
        self._dependencies = DependencyTracker(parsed.elements, self._values, self.dependency_map)
        self._on_change = on_change

        if resolver is not None:
            self.schema = schema
            self.resolver = resolver
        else:
            self.schema = schema if schema is not None else self.generated_schema
            self.resolver = create_visibility_aware_resolver(
                self.schema,
                get_visibility=lambda: self._visibility,
                invisible_field_validation=invisible_field_validation,
                conditions=self.generated_schema.conditions,
            )

    @property
    def visibility(self) -> VisibilityState:
        """Current visibility state; replaced wholesale, never mutated in place."""
        return self._visibility

    def is_visible(self, path: str) -> bool:
        return self._visibility.get(path, True)

    def get_values(self) -> dict[str, Any]:
        """Copy of the current values."""
        return copy.deepcopy(self._values)

    def get_value(self, path: str) -> Any:
        return copy.deepcopy(get_nested_value(self._values, path))

    def on_values_changed(
        self,
        changed_path: str | None,
        all_values: Mapping[str, Any],
    ) -> ValuesChangedResult:
        """
        Process one value-change event.

        Visibility is recomputed first, then dependency resets are planned.
        Resets are returned, not applied, and are seen by the next
        recomputation. `all_values` is not modified.

        Args:
            changed_path: Path of the field that changed, or None when the
                whole form changed at once (no resets are planned then).
            all_values: Current form values.

        Returns:
            ValuesChangedResult with the visibility state, the paths whose
            visibility flipped and the planned resets.
        """
        computed = calculate_visibility(self.config.elements, all_values)
        changed = diff_visibility(self._visibility, computed)
        self._visibility = get_updated_visibility(self._visibility, computed)
        if changed:
            logger.debug(f"Visibility changed for {sorted(changed)}")

        resets: dict[str, Any] = {}
        if changed_path:
            resets = self._dependencies.handle_change(changed_path, all_values)

        return ValuesChangedResult(
            visibility=dict(self._visibility),
            changed=changed,
            resets=resets,
        )

    def set_value(self, path: str, value: Any) -> ValuesChangedResult:
        """
        Assign a value and run the change pipeline.

        Order: visibility, then dependency resets (applied to the values),
        then the on_change callback.
        """
        self._values = set_nested_value(self._values, path, copy.deepcopy(value))
        result = self.on_values_changed(path, self._values)

        for dependent, default in result.resets.items():
            self._values = set_nested_value(self._values, dependent, default)

        if self._on_change is not None:
            self._on_change(self.get_values(), path)
        return result

    def reset(self, values: Mapping[str, Any] | None = None) -> VisibilityState:
        """
        Restore default values (or defaults overlaid with `values`).

        Dependency tracking is re-seeded, so the reset itself triggers no
        cascading resets.
        """
        if values is None:
            self._values = copy.deepcopy(self.default_values)
        else:
            self._values = merge_defaults(self.config, values)
        self._visibility = calculate_visibility(self.config.elements, self._values)
        self._dependencies.observe(self._values)
        return self._visibility

    def validate(self, values: Mapping[str, Any] | None = None) -> ResolverResult:
        """Run the resolver against `values`, or the engine's current values."""
        return self.resolver(values if values is not None else self.get_values())


def create_form_engine(
    config: FormConfiguration | Mapping[str, Any],
    initial_data: Mapping[str, Any] | None = None,
    invisible_field_validation: InvisibleFieldValidation | None = None,
    registry: CustomComponentRegistry | None = None,
    on_change: OnChangeHandler | None = None,
) -> FormEngine:
    """
    Convenience function to create a FormEngine.

    Example:
        >>> from dynaform import create_form_engine
        >>> engine = create_form_engine({"elements": [{"type": "text", "name": "name"}]})
        >>> engine.get_values()
        {'name': ''}
    """
    return FormEngine(
        config,
        initial_data=initial_data,
        invisible_field_validation=invisible_field_validation,
        registry=registry,
        on_change=on_change,
    )
