"""
Element models for form configurations.

A form configuration is a tree of elements. Field elements bind a value
at a dot-notation path ("source.name"); container and column elements
only arrange their descendants and can hide them as a group.

The models accept the camelCase JSON keys used in persisted
configurations (defaultValue, dependsOn, ...) as well as the Python
attribute names.
"""

from typing import Annotated, Any, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# A rule is a JSON-shaped expression, interpreted by dynaform.logic.
Rule = Any

FIELD_TYPES: tuple[str, ...] = ("text", "email", "boolean", "phone", "date", "custom")
STRING_FIELD_TYPES: tuple[str, ...] = ("text", "email", "phone", "date")


class ValidationConfig(BaseModel):
    """Validation rules attached to a single field."""

    model_config = ConfigDict(populate_by_name=True)

    required: bool | None = Field(default=None, description="Field must be filled in (booleans: must be true)")
    min_length: int | None = Field(default=None, ge=0, alias="minLength", description="Minimum string length")
    max_length: int | None = Field(default=None, ge=0, alias="maxLength", description="Maximum string length")
    pattern: str | None = Field(default=None, description="Regex pattern the value must match")
    message: str | None = Field(default=None, description="Error message used when the pattern fails")
    condition: Rule | None = Field(
        default=None,
        description="Rule that must evaluate truthy for these validations to apply",
    )


class BaseFieldElement(BaseModel):
    """Attributes shared by every field element."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, description="Dot-notation path of the value, e.g. 'source.name'")
    label: str | None = Field(default=None, description="Display label")
    placeholder: str | None = Field(default=None, description="Placeholder text")
    default_value: Any = Field(default=None, alias="defaultValue", description="Initial value")
    validation: ValidationConfig | None = Field(default=None, description="Validation rules")
    visible: Rule | None = Field(default=None, description="Visibility rule")
    depends_on: str | None = Field(
        default=None,
        alias="dependsOn",
        description="Path of the field whose changes reset this one",
    )
    reset_on_parent_change: bool | None = Field(
        default=None,
        alias="resetOnParentChange",
        description="Set to false to keep the value when the parent changes",
    )

    @field_validator("name")
    @classmethod
    def _check_segments(cls, value: str) -> str:
        if any(segment == "" for segment in value.split(".")):
            raise ValueError(f"field name '{value}' contains an empty path segment")
        return value

    def iter_children(self) -> Iterator["FormElement"]:
        return iter(())


class TextFieldElement(BaseFieldElement):
    type: Literal["text"] = "text"


class EmailFieldElement(BaseFieldElement):
    type: Literal["email"] = "email"


class BooleanFieldElement(BaseFieldElement):
    type: Literal["boolean"] = "boolean"


class PhoneFieldElement(BaseFieldElement):
    type: Literal["phone"] = "phone"


class DateFieldElement(BaseFieldElement):
    """Date field; the value is an ISO date string."""

    type: Literal["date"] = "date"


class CustomFieldElement(BaseFieldElement):
    """Field backed by a user-registered custom component."""

    type: Literal["custom"] = "custom"
    component: str = Field(..., min_length=1, description="Registered custom component name")
    component_props: dict[str, Any] | None = Field(
        default=None,
        alias="componentProps",
        description="Opaque props passed to the component",
    )


class ContainerElement(BaseModel):
    """
    Layout element grouping other elements.

    The default variant lays out `columns`; the "section" variant holds
    `children` directly.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["container"] = "container"
    variant: str | None = Field(default=None, description="Layout variant, e.g. 'section'")
    columns: list["ColumnElement"] | None = Field(default=None)
    children: list["FormElement"] | None = Field(default=None)
    visible: Rule | None = Field(default=None, description="Visibility rule gating all descendants")
    id: str | None = Field(default=None)
    title: str | None = Field(default=None)

    @model_validator(mode="after")
    def _check_single_branch(self) -> "ContainerElement":
        if self.columns and self.children:
            raise ValueError("container cannot define both 'columns' and 'children'")
        return self

    @property
    def is_section(self) -> bool:
        return self.variant == "section"

    def iter_children(self) -> Iterator["FormElement"]:
        yield from self.columns or []
        yield from self.children or []


class ColumnElement(BaseModel):
    """A column inside a container."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["column"] = "column"
    width: str = Field(..., description="Column width, e.g. '50%'")
    elements: list["FormElement"] = Field(default_factory=list)
    visible: Rule | None = Field(default=None, description="Visibility rule gating all descendants")

    def iter_children(self) -> Iterator["FormElement"]:
        yield from self.elements


FieldElement = Union[
    TextFieldElement,
    EmailFieldElement,
    BooleanFieldElement,
    PhoneFieldElement,
    DateFieldElement,
    CustomFieldElement,
]

LayoutElement = Union[ContainerElement, ColumnElement]

FormElement = Annotated[
    Union[
        TextFieldElement,
        EmailFieldElement,
        BooleanFieldElement,
        PhoneFieldElement,
        DateFieldElement,
        CustomFieldElement,
        ContainerElement,
        ColumnElement,
    ],
    Field(discriminator="type"),
]

ContainerElement.model_rebuild()
ColumnElement.model_rebuild()


class FormConfiguration(BaseModel):
    """Root of a form configuration."""

    model_config = ConfigDict(populate_by_name=True)

    elements: list[FormElement] = Field(default_factory=list, description="Top-level elements")
    id: str | None = Field(default=None, description="Form identifier")
    title: str | None = Field(default=None, description="Form title")

    def to_json(self) -> dict[str, Any]:
        """Export in the persisted camelCase JSON shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


def is_field_element(element: Any) -> bool:
    return isinstance(element, BaseFieldElement)


def is_container_element(element: Any) -> bool:
    return isinstance(element, ContainerElement)


def is_column_element(element: Any) -> bool:
    return isinstance(element, ColumnElement)


def is_custom_field_element(element: Any) -> bool:
    return isinstance(element, CustomFieldElement)


def is_section_container(element: Any) -> bool:
    return isinstance(element, ContainerElement) and element.is_section
