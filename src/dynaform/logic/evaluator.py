"""
Rule evaluator.

Rules are JSON-shaped expressions. An operation is a single-key object
``{"<op>": args}`` (args may be a list or a single rule), or the explicit
form ``{"op": "<op>", "args": [...]}``. Lists evaluate item by item;
anything else is a literal.

Operators: var, and, or, not (!), !!, ==, != (===, !==), <, <=, >, >=,
if (?:) and regex_match.

Evaluation is total. Unknown operators, wrong arity and var paths that do
not resolve all produce None, which every operator treats as falsy.

Example:
    >>> evaluate({"==": [{"var": "contact.method"}, "email"]}, {"contact": {"method": "email"}})
    True
    >>> evaluate({"regex_match": ["^[A-Z]{3}$", {"var": "code"}]}, {"code": "abc"})
    False
"""

import functools
import logging
import re
from typing import Any, Callable, Iterator, Mapping

from dynaform.config import get_config
from dynaform.models.elements import Rule
from dynaform.paths import get_nested_value

logger = logging.getLogger("dynaform.logic")

_MISSING = object()


def is_truthy(value: Any) -> bool:
    """Truthiness used by every operator: "", 0, None, False and empty collections are falsy."""
    return bool(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_operation(rule: Any) -> tuple[str, list] | None:
    if not isinstance(rule, Mapping):
        return None
    if isinstance(rule.get("op"), str) and set(rule) <= {"op", "args"}:
        op, args = rule["op"], rule.get("args", [])
    elif len(rule) == 1:
        op, args = next(iter(rule.items()))
    else:
        return None
    if not isinstance(args, (list, tuple)):
        args = [args]
    return str(op), list(args)


def strict_equals(left: Any, right: Any) -> bool:
    """Structural equality; values of different types are never equal (True is not 1)."""
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _ordered(left: Any, right: Any, strict: bool) -> bool:
    comparable = (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not comparable:
        return False
    return left < right if strict else left <= right


# re.compile raises OverflowError for repetition counts like a{99999999999}.
PATTERN_ERRORS = (re.error, OverflowError)


def translate_pattern(pattern: str) -> str:
    """
    Adapt a configuration regex to Python semantics.

    Configurations carry browser-style patterns, where `$` only matches at
    the very end of the input. Python's `$` also matches before a trailing
    newline, so every unescaped `$` outside a character class becomes `\\Z`.

    Example:
        >>> translate_pattern(r"^\\d{3}$")
        '^\\\\d{3}\\\\Z'
    """
    parts: list[str] = []
    in_class = False
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            parts.append(pattern[index:index + 2])
            index += 2
            continue
        if char == "[" and not in_class:
            in_class = True
        elif char == "]" and in_class:
            in_class = False
        elif char == "$" and not in_class:
            char = r"\Z"
        parts.append(char)
        index += 1
    return "".join(parts)


@functools.lru_cache(maxsize=get_config().regex_cache_size)
def compile_pattern(pattern: str) -> re.Pattern | None:
    """Compile a regex, caching the result; None (with a warning) if it is invalid."""
    try:
        return re.compile(translate_pattern(pattern))
    except PATTERN_ERRORS as e:
        logger.warning(f"Invalid regex pattern in rule: {pattern!r} ({e})")
        return None


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# Operation implementations receive unevaluated args so that and/or/if
# can short-circuit.


def _op_var(args: list, context: Any) -> Any:
    path = _evaluate(args[0], context) if args else None
    default = _evaluate(args[1], context) if len(args) > 1 else None
    if path is None or path == "":
        return context
    value = get_nested_value(context, str(path), _MISSING)
    if value is _MISSING or value is None:
        return default
    return value


def _op_and(args: list, context: Any) -> Any:
    result = None
    for arg in args:
        result = _evaluate(arg, context)
        if not is_truthy(result):
            return result
    return result


def _op_or(args: list, context: Any) -> Any:
    result = None
    for arg in args:
        result = _evaluate(arg, context)
        if is_truthy(result):
            return result
    return result


def _op_not(args: list, context: Any) -> Any:
    if len(args) != 1:
        return None
    return not is_truthy(_evaluate(args[0], context))


def _op_double_not(args: list, context: Any) -> Any:
    if len(args) != 1:
        return None
    return is_truthy(_evaluate(args[0], context))


def _op_equals(args: list, context: Any) -> Any:
    if len(args) != 2:
        return None
    return strict_equals(_evaluate(args[0], context), _evaluate(args[1], context))


def _op_not_equals(args: list, context: Any) -> Any:
    if len(args) != 2:
        return None
    return not strict_equals(_evaluate(args[0], context), _evaluate(args[1], context))


def _comparison(strict: bool, reverse: bool, allow_between: bool) -> Callable[[list, Any], Any]:
    def compare(args: list, context: Any) -> Any:
        values = [_evaluate(arg, context) for arg in args]
        if len(values) == 3 and allow_between:
            # {"<": [a, b, c]} means a < b < c
            return _ordered(values[0], values[1], strict) and _ordered(values[1], values[2], strict)
        if len(values) != 2:
            return None
        left, right = values
        if reverse:
            left, right = right, left
        return _ordered(left, right, strict)

    return compare


def _op_if(args: list, context: Any) -> Any:
    # [cond, then, cond2, then2, ..., else]
    index = 0
    while index + 1 < len(args):
        if is_truthy(_evaluate(args[index], context)):
            return _evaluate(args[index + 1], context)
        index += 2
    if index < len(args):
        return _evaluate(args[index], context)
    return None


def _op_regex_match(args: list, context: Any) -> Any:
    if len(args) != 2:
        return None
    pattern = _evaluate(args[0], context)
    if not isinstance(pattern, str):
        return False
    compiled = compile_pattern(pattern)
    if compiled is None:
        return False
    return compiled.search(_to_text(_evaluate(args[1], context))) is not None


OPERATIONS: dict[str, Callable[[list, Any], Any]] = {
    "var": _op_var,
    "and": _op_and,
    "or": _op_or,
    "not": _op_not,
    "!": _op_not,
    "!!": _op_double_not,
    "==": _op_equals,
    "===": _op_equals,
    "!=": _op_not_equals,
    "!==": _op_not_equals,
    "<": _comparison(strict=True, reverse=False, allow_between=True),
    "<=": _comparison(strict=False, reverse=False, allow_between=True),
    ">": _comparison(strict=True, reverse=True, allow_between=False),
    ">=": _comparison(strict=False, reverse=True, allow_between=False),
    "if": _op_if,
    "?:": _op_if,
    "regex_match": _op_regex_match,
}

OPERATORS: frozenset[str] = frozenset(OPERATIONS)


def _evaluate(rule: Any, context: Any) -> Any:
    if isinstance(rule, (list, tuple)):
        return [_evaluate(item, context) for item in rule]

    operation = _as_operation(rule)
    if operation is None:
        return rule

    op, args = operation
    handler = OPERATIONS.get(op)
    if handler is None:
        logger.debug(f"Unknown rule operator '{op}' evaluated as undefined")
        return None
    return handler(args, context)


def evaluate(rule: Rule, context: Mapping[str, Any] | None = None) -> Any:
    """
    Evaluate a rule against form data.

    Args:
        rule: JSON-shaped rule.
        context: Current (possibly partial) form data.

    Returns:
        The rule's value; None when it cannot be determined.
    """
    try:
        return _evaluate(rule, context if context is not None else {})
    except RecursionError:
        logger.warning("Rule nesting too deep; evaluated as undefined")
        return None


def evaluate_condition(rule: Rule | None, context: Mapping[str, Any] | None = None) -> bool:
    """Evaluate a rule as a boolean. A missing rule (None) is always satisfied."""
    if rule is None:
        return True
    return is_truthy(evaluate(rule, context))


def iter_operations(rule: Any) -> Iterator[tuple[str, list]]:
    """Yield (operator, args) for every operation node in a rule, outermost first."""
    if isinstance(rule, (list, tuple)):
        for item in rule:
            yield from iter_operations(item)
        return
    operation = _as_operation(rule)
    if operation is None:
        return
    yield operation
    for arg in operation[1]:
        yield from iter_operations(arg)


def collect_rule_vars(rule: Any) -> list[str]:
    """Literal paths referenced by var operations, in order of appearance."""
    paths: list[str] = []
    for op, args in iter_operations(rule):
        if op == "var" and args and isinstance(args[0], (str, int)) and args[0] != "":
            path = str(args[0])
            if path not in paths:
                paths.append(path)
    return paths


def collect_unknown_operators(rule: Any) -> list[str]:
    return [op for op, _ in iter_operations(rule) if op not in OPERATORS]
