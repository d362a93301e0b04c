"""Tests for schema synthesis."""

import logging

import pytest

from dynaform.errors import ConfigurationError
from dynaform.models.elements import (
    BooleanFieldElement,
    CustomFieldElement,
    EmailFieldElement,
    TextFieldElement,
)
from dynaform.schema import (
    build_field_schema,
    generate_schema,
    get_schema_field_paths,
    is_field_optional,
)


def _errors(result):
    return result.to_error_dict()


class TestFieldSchema:
    """Tests for per-field schema building."""

    def test_optional_unless_required(self):
        """Test that only validation.required makes a field required."""
        assert is_field_optional(TextFieldElement(name="a"))
        assert is_field_optional(TextFieldElement(name="a", validation={"required": False}))
        assert not is_field_optional(TextFieldElement(name="a", validation={"required": True}))

    def test_optional_default(self):
        """Test that optional fields carry their default."""
        schema = build_field_schema(TextFieldElement(name="a", defaultValue="x"))
        assert schema.required is False
        assert schema.default == "x"
        assert build_field_schema(BooleanFieldElement(name="b")).default is False
        assert build_field_schema(CustomFieldElement(name="c", component="Rating")).default is None

    def test_email_field_type(self):
        """Test that email schemas remember their field type."""
        assert build_field_schema(EmailFieldElement(name="e")).field_type == "email"


class TestStringRules:
    """Tests for string validation rules."""

    def test_length_bounds(self):
        """Test minLength and maxLength."""
        schema = generate_schema({
            "elements": [
                {"type": "text", "name": "name", "validation": {"minLength": 3, "maxLength": 5}}
            ]
        })
        assert _errors(schema.validate({"name": "Jo"})) == {"name": ["Must be at least 3 characters"]}
        assert _errors(schema.validate({"name": "Jonathan"})) == {"name": ["Must be no more than 5 characters"]}
        assert schema.validate({"name": "John"}).is_valid

    def test_required_string(self):
        """Test that required rejects missing and empty values."""
        schema = generate_schema({
            "elements": [{"type": "text", "name": "name", "validation": {"required": True, "minLength": 2}}]
        })
        assert _errors(schema.validate({})) == {"name": ["This field is required"]}
        assert _errors(schema.validate({"name": ""})) == {"name": ["This field is required"]}

    def test_pattern_with_message(self):
        """Test pattern uses the custom message when given."""
        schema = generate_schema({
            "elements": [
                {"type": "text", "name": "zip", "validation": {"pattern": "^[0-9]{5}$", "message": "Five digits"}},
                {"type": "phone", "name": "phone", "validation": {"pattern": "^\\+"}},
            ]
        })
        result = schema.validate({"zip": "12a45", "phone": "555"})
        assert _errors(result) == {"zip": ["Five digits"], "phone": ["Invalid format"]}

    def test_invalid_pattern_is_skipped(self, caplog):
        """Test that an invalid regex skips the check with a warning."""
        with caplog.at_level(logging.WARNING, logger="dynaform.schema"):
            schema = generate_schema({
                "elements": [{"type": "text", "name": "code", "validation": {"pattern": "([bad"}}]
            })
        assert schema.validate({"code": "anything"}).is_valid
        assert "pattern check skipped" in caplog.text

    def test_overflowing_pattern_is_skipped(self, caplog):
        """Test that a repetition count too large to compile skips the check."""
        with caplog.at_level(logging.WARNING, logger="dynaform.schema"):
            schema = generate_schema({
                "elements": [{"type": "text", "name": "z", "validation": {"pattern": "a{99999999999}"}}]
            })
        assert schema.validate({"z": "anything"}).is_valid
        assert "pattern check skipped" in caplog.text

    def test_pattern_end_anchor_rejects_trailing_newline(self):
        """Test that $ in a pattern does not accept a trailing newline."""
        schema = generate_schema({
            "elements": [{"type": "text", "name": "zip", "validation": {"pattern": "^\\d{3}$"}}]
        })
        assert schema.validate({"zip": "123"}).is_valid
        assert _errors(schema.validate({"zip": "123\n"})) == {"zip": ["Invalid format"]}

    def test_email_format(self):
        """Test the email shape check; empty strings are left to required."""
        schema = generate_schema({"elements": [{"type": "email", "name": "email"}]})
        assert _errors(schema.validate({"email": "not-an-email"})) == {"email": ["Invalid email address"]}
        assert schema.validate({"email": "jo@example.com"}).is_valid
        assert schema.validate({"email": ""}).is_valid

    def test_email_with_trailing_newline_rejected(self):
        """Test that the email shape must span the whole value."""
        schema = generate_schema({"elements": [{"type": "email", "name": "email"}]})
        assert _errors(schema.validate({"email": "a@b.co\n"})) == {"email": ["Invalid email address"]}

    def test_string_type_is_strict(self):
        """Test that non-string values are rejected for text fields."""
        schema = generate_schema({"elements": [{"type": "text", "name": "name"}]})
        result = schema.validate({"name": 42})
        assert not result.is_valid
        assert result.errors[0].path == "name"


class TestBooleanRules:
    """Tests for boolean fields."""

    def test_required_boolean_must_be_true(self):
        """Test that a required boolean rejects False."""
        schema = generate_schema({
            "elements": [{"type": "boolean", "name": "terms", "validation": {"required": True}}]
        })
        assert _errors(schema.validate({"terms": False})) == {"terms": ["This field is required"]}
        assert schema.validate({"terms": True}).is_valid

    def test_optional_boolean_accepts_both(self):
        """Test that a boolean without required accepts True and False."""
        schema = generate_schema({"elements": [{"type": "boolean", "name": "newsletter"}]})
        assert schema.validate({"newsletter": True}).is_valid
        assert schema.validate({"newsletter": False}).is_valid
        assert schema.validate({}).validated_data == {"newsletter": False}


class TestNestedOutput:
    """Tests for dot-path field names."""

    @pytest.fixture
    def schema(self):
        return generate_schema({
            "elements": [
                {"type": "text", "name": "source.name", "validation": {"required": True}},
                {"type": "email", "name": "source.email"},
                {"type": "boolean", "name": "active"},
            ]
        })

    def test_flat_input_produces_nested_output(self, schema):
        """Test that dotted keys validate into nested data."""
        result = schema.validate({"source.name": "John", "source.email": "john@example.com", "active": True})
        assert result.is_valid
        assert result.validated_data == {
            "source": {"name": "John", "email": "john@example.com"},
            "active": True,
        }

    def test_nested_input(self, schema):
        """Test that nested input is accepted as is."""
        result = schema.validate({"source": {"name": "John"}})
        assert result.is_valid
        assert result.validated_data["source"] == {"name": "John", "email": ""}

    def test_errors_use_dot_paths(self, schema):
        """Test that nested errors are keyed by the full dot path."""
        result = schema.validate({"source": {"name": "", "email": "bad"}})
        assert _errors(result) == {
            "source.name": ["This field is required"],
            "source.email": ["Invalid email address"],
        }

    def test_nested_levels_keep_unknown_keys(self, schema):
        """Test that nested levels are open while the root strips unknown keys."""
        result = schema.validate({"source": {"name": "John", "extra": 1}, "stray": 2})
        assert result.validated_data["source"]["extra"] == 1
        assert "stray" not in result.validated_data

    def test_optional_nested_level_may_be_absent(self):
        """Test that a level with only optional fields defaults when missing."""
        schema = generate_schema({"elements": [{"type": "text", "name": "meta.note"}]})
        result = schema.validate({})
        assert result.is_valid
        assert result.validated_data == {"meta": {"note": ""}}

    def test_normalize(self, schema):
        """Test shaping unvalidated data like a validated result."""
        normalized = schema.normalize({"source.name": "", "source.extra": 1, "stray": 2})
        assert normalized == {"source": {"name": "", "extra": 1, "email": ""}, "active": False}

    def test_field_paths(self, schema):
        """Test listing schema field paths."""
        assert get_schema_field_paths(schema) == ["source.name", "source.email", "active"]


class TestSchemaGeneration:
    """Tests for whole-form generation."""

    def test_fields_inside_layout(self):
        """Test that fields inside containers and columns are collected."""
        schema = generate_schema({
            "elements": [
                {
                    "type": "container",
                    "columns": [
                        {"type": "column", "width": "50%", "elements": [{"type": "text", "name": "left"}]},
                        {"type": "column", "width": "50%", "elements": [{"type": "text", "name": "right"}]},
                    ],
                },
                {"type": "container", "variant": "section", "children": [{"type": "boolean", "name": "inner"}]},
            ]
        })
        assert schema.field_paths() == ["left", "right", "inner"]

    def test_conditions_collected(self):
        """Test that validation conditions are recorded by path."""
        condition = {"==": [{"var": "kind"}, "company"]}
        schema = generate_schema({
            "elements": [
                {"type": "text", "name": "kind"},
                {"type": "text", "name": "vat", "validation": {"required": True, "condition": condition}},
            ]
        })
        assert schema.conditions == {"vat": condition}

    def test_colliding_paths_rejected(self):
        """Test that 'a' and 'a.b' cannot coexist."""
        with pytest.raises(ConfigurationError):
            generate_schema({
                "elements": [
                    {"type": "text", "name": "a"},
                    {"type": "text", "name": "a.b"},
                ]
            })

    def test_json_schema_uses_segment_names(self):
        """Test that the exported JSON schema uses path segments as keys."""
        schema = generate_schema({
            "elements": [{"type": "text", "name": "source.name", "validation": {"required": True}}]
        })
        exported = schema.to_json_schema()
        assert "source" in exported["properties"]
        assert exported["required"] == ["source"]
