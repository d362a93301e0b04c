"""
Runtime engine: visibility, dependency resets and the visibility-aware resolver.
"""

from dynaform.engine.dependencies import (
    DependencyMap,
    DependencyTracker,
    build_dependency_map,
    should_reset_on_parent_change,
)
from dynaform.engine.resolver import (
    PydanticValidator,
    Resolver,
    SchemaValidator,
    as_validator,
    create_visibility_aware_resolver,
    is_condition_active,
    is_path_hidden,
)
from dynaform.engine.visibility import (
    VisibilityState,
    calculate_visibility,
    diff_visibility,
    get_updated_visibility,
)

__all__ = [
    # Dependencies
    "DependencyMap",
    "DependencyTracker",
    "build_dependency_map",
    "should_reset_on_parent_change",
    # Resolver
    "PydanticValidator",
    "Resolver",
    "SchemaValidator",
    "as_validator",
    "create_visibility_aware_resolver",
    "is_condition_active",
    "is_path_hidden",
    # Visibility
    "VisibilityState",
    "calculate_visibility",
    "diff_visibility",
    "get_updated_visibility",
]
