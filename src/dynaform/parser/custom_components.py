"""
Custom component registry.

Custom fields name a component; the registry resolves that name to a
CustomComponentDefinition. Resolution failures are configuration errors,
so a form never silently renders a custom field with nothing behind it.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ValidationError

from dynaform.errors import ComponentNotFoundError, ConfigurationError
from dynaform.models.elements import (
    ColumnElement,
    ContainerElement,
    CustomFieldElement,
    FormConfiguration,
)
from dynaform.parser.config_parser import format_location
from dynaform.tree import flatten_fields

logger = logging.getLogger("dynaform.parser")


@dataclass(frozen=True)
class CustomComponentDefinition:
    """
    A named custom capability.

    Attributes:
        name: Name custom elements use in their `component` key.
        props_schema: Optional pydantic model validating `componentProps`.
        default_value: Default for fields that declare none.
        description: Free-form description.
    """

    name: str
    props_schema: type[BaseModel] | None = None
    default_value: Any = None
    description: str | None = None

    def validate_props(self, props: Mapping[str, Any] | None) -> dict[str, Any]:
        """Validate props against props_schema (if any) and return them as a dict."""
        props = dict(props or {})
        if self.props_schema is None:
            return props
        return self.props_schema.model_validate(props).model_dump()


def define_custom_component(
    name: str,
    props_schema: type[BaseModel] | None = None,
    default_value: Any = None,
    description: str | None = None,
) -> CustomComponentDefinition:
    """
    Define a custom component.

    Example:
        >>> class RatingProps(BaseModel):
        ...     max_rating: int = 5
        >>> rating = define_custom_component("Rating", props_schema=RatingProps, default_value=0)
    """
    return CustomComponentDefinition(
        name=name,
        props_schema=props_schema,
        default_value=default_value,
        description=description,
    )


class CustomComponentRegistry:
    """Lookup of custom components by name."""

    def __init__(
        self,
        components: Iterable[CustomComponentDefinition] | Mapping[str, CustomComponentDefinition] | None = None,
    ):
        self._components: dict[str, CustomComponentDefinition] = {}
        if isinstance(components, Mapping):
            components = components.values()
        for definition in components or ():
            self.register(definition)

    def register(self, definition: CustomComponentDefinition) -> CustomComponentDefinition:
        if definition.name in self._components:
            logger.debug(f"Replacing custom component '{definition.name}'")
        self._components[definition.name] = definition
        return definition

    def get(self, name: str, path: str | None = None) -> CustomComponentDefinition:
        """
        Resolve a component by name.

        Raises:
            ComponentNotFoundError: If nothing is registered under `name`.
        """
        try:
            return self._components[name]
        except KeyError:
            raise ComponentNotFoundError(name, path=path) from None

    def names(self) -> list[str]:
        return sorted(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __len__(self) -> int:
        return len(self._components)


def _validate_custom(
    element: CustomFieldElement,
    registry: CustomComponentRegistry,
    path: str,
) -> CustomFieldElement:
    definition = registry.get(element.component, path=path)
    try:
        props = definition.validate_props(element.component_props)
    except ValidationError as e:
        first = e.errors()[0]
        where = format_location(first["loc"])
        message = f"invalid componentProps: {first['msg']}"
        if where:
            message = f"invalid componentProps.{where}: {first['msg']}"
        raise ConfigurationError(message, path=path, component=element.component) from e

    update: dict[str, Any] = {"component_props": props}
    if element.default_value is None and definition.default_value is not None:
        update["default_value"] = copy.deepcopy(definition.default_value)
    return element.model_copy(update=update)


def _validate_elements(elements: list, registry: CustomComponentRegistry, base_path: str) -> list:
    return [
        _validate_element(element, registry, f"{base_path}[{index}]")
        for index, element in enumerate(elements)
    ]


def _validate_element(element: Any, registry: CustomComponentRegistry, path: str) -> Any:
    if isinstance(element, CustomFieldElement):
        return _validate_custom(element, registry, path)

    if isinstance(element, ContainerElement):
        update: dict[str, Any] = {}
        if element.columns:
            update["columns"] = _validate_elements(element.columns, registry, f"{path}.columns")
        if element.children:
            update["children"] = _validate_elements(element.children, registry, f"{path}.children")
        return element.model_copy(update=update) if update else element

    if isinstance(element, ColumnElement):
        return element.model_copy(
            update={"elements": _validate_elements(element.elements, registry, f"{path}.elements")}
        )

    return element


def validate_custom_components(
    config: FormConfiguration,
    registry: CustomComponentRegistry | None = None,
) -> FormConfiguration:
    """
    Resolve and validate every custom element in a configuration.

    Returns a new configuration whose custom elements carry validated
    componentProps (and the component's default value where the element
    declares none). The input configuration is not modified.

    Raises:
        ComponentNotFoundError: If a custom element names an unregistered component.
        ConfigurationError: If componentProps fail the component's props_schema.
    """
    registry = registry if registry is not None else CustomComponentRegistry()
    elements = _validate_elements(config.elements, registry, "elements")
    return config.model_copy(update={"elements": elements})


def get_custom_elements(config: FormConfiguration) -> list[CustomFieldElement]:
    """All custom elements, with componentProps normalised to a dict."""
    return [
        field.model_copy(update={"component_props": dict(field.component_props or {})})
        for field in flatten_fields(config.elements)
        if isinstance(field, CustomFieldElement)
    ]
