"""
Configuration parsing and custom component validation.
"""

from dynaform.parser.config_parser import (
    ParseResult,
    check_structure,
    format_location,
    lint_references,
    parse_configuration,
    safe_parse_configuration,
)
from dynaform.parser.custom_components import (
    CustomComponentDefinition,
    CustomComponentRegistry,
    define_custom_component,
    get_custom_elements,
    validate_custom_components,
)

__all__ = [
    "ParseResult",
    "check_structure",
    "format_location",
    "lint_references",
    "parse_configuration",
    "safe_parse_configuration",
    "CustomComponentDefinition",
    "CustomComponentRegistry",
    "define_custom_component",
    "get_custom_elements",
    "validate_custom_components",
]
