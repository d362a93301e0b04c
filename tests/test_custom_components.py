"""Tests for the custom component registry."""

import pytest
from pydantic import BaseModel, Field

from dynaform.errors import ComponentNotFoundError, ConfigurationError
from dynaform.parser import (
    CustomComponentRegistry,
    define_custom_component,
    get_custom_elements,
    parse_configuration,
    validate_custom_components,
)


class RatingProps(BaseModel):
    max_rating: int = Field(default=5, ge=1)


@pytest.fixture
def registry():
    return CustomComponentRegistry([
        define_custom_component("Rating", props_schema=RatingProps, default_value=0),
        define_custom_component("Signature"),
    ])


def _config(*elements):
    return parse_configuration({"elements": list(elements)})


class TestRegistry:
    """Tests for CustomComponentRegistry."""

    def test_lookup(self, registry):
        """Test resolving registered components."""
        assert "Rating" in registry
        assert len(registry) == 2
        assert registry.names() == ["Rating", "Signature"]
        assert registry.get("Rating").default_value == 0

    def test_missing_component(self, registry):
        """Test that unknown names raise ComponentNotFoundError."""
        with pytest.raises(ComponentNotFoundError) as exc_info:
            registry.get("Slider", path="elements[3]")
        assert exc_info.value.component == "Slider"
        assert str(exc_info.value) == 'Component "Slider" at elements[3]: No custom component registered under this name'

    def test_mapping_constructor(self):
        """Test building a registry from a name mapping."""
        registry = CustomComponentRegistry({"Rating": define_custom_component("Rating")})
        assert registry.names() == ["Rating"]


class TestValidateCustomComponents:
    """Tests for validate_custom_components."""

    def test_props_validated_and_defaulted(self, registry):
        """Test props are validated and the component default applied."""
        config = _config({"type": "custom", "name": "score", "component": "Rating"})
        validated = validate_custom_components(config, registry)
        field = validated.elements[0]
        assert field.component_props == {"max_rating": 5}
        assert field.default_value == 0
        assert config.elements[0].default_value is None

    def test_declared_default_wins(self, registry):
        """Test that an element's own defaultValue is kept."""
        config = _config({"type": "custom", "name": "score", "component": "Rating", "defaultValue": 3})
        assert validate_custom_components(config, registry).elements[0].default_value == 3

    def test_invalid_props(self, registry):
        """Test that invalid props raise with the element path and component."""
        config = _config({
            "type": "container",
            "columns": [{
                "type": "column",
                "width": "100%",
                "elements": [
                    {"type": "custom", "name": "score", "component": "Rating", "componentProps": {"max_rating": 0}}
                ],
            }],
        })
        with pytest.raises(ConfigurationError) as exc_info:
            validate_custom_components(config, registry)
        error = exc_info.value
        assert error.path == "elements[0].columns[0].elements[0]"
        assert error.component == "Rating"
        assert "componentProps.max_rating" in error.message

    def test_unregistered_component(self, registry):
        """Test that an unknown component is fatal for the configuration."""
        config = _config(
            {"type": "text", "name": "a"},
            {"type": "custom", "name": "b", "component": "Slider"},
        )
        with pytest.raises(ComponentNotFoundError) as exc_info:
            validate_custom_components(config, registry)
        assert exc_info.value.path == "elements[1]"

    def test_props_without_schema_pass_through(self, registry):
        """Test components without a props schema keep their props."""
        config = _config({"type": "custom", "name": "sig", "component": "Signature", "componentProps": {"pen": "blue"}})
        assert validate_custom_components(config, registry).elements[0].component_props == {"pen": "blue"}

    def test_get_custom_elements(self):
        """Test listing custom elements with normalised props."""
        config = _config(
            {"type": "text", "name": "a"},
            {"type": "custom", "name": "b", "component": "Signature"},
        )
        customs = get_custom_elements(config)
        assert [field.name for field in customs] == ["b"]
        assert customs[0].component_props == {}
