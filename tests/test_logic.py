"""Tests for the rule evaluator."""

import logging

import pytest

from dynaform.logic import (
    collect_rule_vars,
    collect_unknown_operators,
    evaluate,
    evaluate_condition,
)
from dynaform.logic.evaluator import translate_pattern


class TestVar:
    """Tests for the var operator."""

    def test_simple_and_nested_paths(self):
        """Test reading flat and dotted paths."""
        data = {"age": 21, "contact": {"method": "email"}}
        assert evaluate({"var": "age"}, data) == 21
        assert evaluate({"var": "contact.method"}, data) == "email"

    def test_missing_path_uses_default(self):
        """Test that unresolved paths return the default or None."""
        assert evaluate({"var": "missing"}, {}) is None
        assert evaluate({"var": ["missing", "fallback"]}, {}) == "fallback"

    def test_empty_path_returns_context(self):
        """Test that var '' returns the whole data object."""
        assert evaluate({"var": ""}, {"a": 1}) == {"a": 1}


class TestOperators:
    """Tests for logical, comparison and regex operators."""

    def test_and_or_short_circuit(self):
        """Test and/or return the deciding operand."""
        assert evaluate({"and": [True, 0, "never"]}, {}) == 0
        assert evaluate({"or": [False, "", "yes"]}, {}) == "yes"

    def test_not(self):
        """Test negation operators."""
        assert evaluate({"!": [{"var": "x"}]}, {"x": ""}) is True
        assert evaluate({"not": {"var": "x"}}, {"x": "value"}) is False
        assert evaluate({"!!": [{"var": "x"}]}, {"x": "value"}) is True

    def test_strict_equality(self):
        """Test that equality never coerces across types."""
        assert evaluate({"==": [1, 1.0]}, {}) is True
        assert evaluate({"==": [1, "1"]}, {}) is False
        assert evaluate({"==": [True, 1]}, {}) is False
        assert evaluate({"!=": ["a", "b"]}, {}) is True

    def test_comparisons(self):
        """Test ordering comparisons."""
        data = {"age": 21}
        assert evaluate({">=": [{"var": "age"}, 18]}, data) is True
        assert evaluate({"<": [{"var": "age"}, 18]}, data) is False
        assert evaluate({"<": [1, {"var": "age"}, 30]}, data) is True
        assert evaluate({">": ["b", "a"]}, {}) is True

    def test_mixed_type_comparison_is_false(self):
        """Test that numbers and strings never compare."""
        assert evaluate({">": ["10", 5]}, {}) is False

    def test_if(self):
        """Test if/else chains."""
        rule = {"if": [{"var": "a"}, "first", {"var": "b"}, "second", "otherwise"]}
        assert evaluate(rule, {"a": True}) == "first"
        assert evaluate(rule, {"b": True}) == "second"
        assert evaluate(rule, {}) == "otherwise"

    def test_regex_match(self):
        """Test regex_match searches the stringified value."""
        assert evaluate({"regex_match": ["^[A-Z]{3}$", {"var": "code"}]}, {"code": "ABC"}) is True
        assert evaluate({"regex_match": ["^[A-Z]{3}$", {"var": "code"}]}, {"code": "abc"}) is False
        assert evaluate({"regex_match": ["^$", {"var": "missing"}]}, {}) is True
        assert evaluate({"regex_match": ["^true$", {"var": "flag"}]}, {"flag": True}) is True

    def test_invalid_regex_is_false(self, caplog):
        """Test that an invalid pattern evaluates false with a warning."""
        with caplog.at_level(logging.WARNING, logger="dynaform.logic"):
            assert evaluate({"regex_match": ["([unclosed", "x"]}, {}) is False
        assert "Invalid regex" in caplog.text

    def test_overflowing_repetition_is_false(self):
        """Test that a repetition count too large to compile evaluates false."""
        assert evaluate({"regex_match": ["a{99999999999}", "x"]}, {}) is False
        assert not evaluate_condition({"!!": [{"regex_match": ["b{99999999999}", "x"]}]}, {})

    def test_dollar_matches_only_at_end(self):
        """Test that $ does not match before a trailing newline."""
        assert evaluate({"regex_match": ["^\\d{3}$", {"var": "code"}]}, {"code": "123"}) is True
        assert evaluate({"regex_match": ["^\\d{3}$", {"var": "code"}]}, {"code": "123\n"}) is False

    def test_explicit_op_form(self):
        """Test the {"op": ..., "args": [...]} form."""
        assert evaluate({"op": "==", "args": [{"var": "a"}, 1]}, {"a": 1}) is True


class TestTotality:
    """Tests that evaluation never raises."""

    @pytest.mark.parametrize(
        "rule",
        [
            {"unknown_op": [1, 2]},
            {"==": [1]},
            {"!": [1, 2]},
            {"regex_match": [None, "x"]},
        ],
    )
    def test_malformed_rules_are_falsy(self, rule):
        """Test that unknown operators and bad arity evaluate falsy."""
        assert not evaluate_condition(rule, {})

    def test_literals(self):
        """Test that non-operation values are literals."""
        assert evaluate("text", {}) == "text"
        assert evaluate([1, {"var": "a"}], {"a": 2}) == [1, 2]

    def test_missing_rule_is_satisfied(self):
        """Test that evaluate_condition(None) is true."""
        assert evaluate_condition(None, {}) is True


class TestTranslatePattern:
    """Tests for translate_pattern."""

    def test_end_anchor_rewritten(self):
        """Test that a bare $ becomes an absolute end anchor."""
        assert translate_pattern("^abc$") == "^abc\\Z"

    def test_escaped_and_class_dollars_kept(self):
        """Test that \\$ and [$] are left alone."""
        assert translate_pattern("\\$[$]\\d") == "\\$[$]\\d"

    def test_pattern_without_anchor_unchanged(self):
        """Test that other patterns pass through untouched."""
        assert translate_pattern("[A-Z]{3}") == "[A-Z]{3}"


class TestRuleInspection:
    """Tests for rule introspection helpers."""

    def test_collect_rule_vars(self):
        """Test collecting referenced paths in order."""
        rule = {"and": [{"var": "a"}, {"==": [{"var": "b.c"}, {"var": "a"}]}]}
        assert collect_rule_vars(rule) == ["a", "b.c"]

    def test_collect_unknown_operators(self):
        """Test collecting unknown operators."""
        assert collect_unknown_operators({"and": [{"bogus": [1]}, {"var": "a"}]}) == ["bogus"]
