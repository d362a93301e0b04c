"""
Conditional logic for dynaform.

A single interpreter for the fixed rule vocabulary, shared by visibility
and conditional validation.
"""

from dynaform.models.elements import Rule
from dynaform.logic.evaluator import (
    OPERATORS,
    collect_rule_vars,
    collect_unknown_operators,
    evaluate,
    evaluate_condition,
    is_truthy,
    iter_operations,
    strict_equals,
)

__all__ = [
    "Rule",
    "OPERATORS",
    "collect_rule_vars",
    "collect_unknown_operators",
    "evaluate",
    "evaluate_condition",
    "is_truthy",
    "iter_operations",
    "strict_equals",
]
