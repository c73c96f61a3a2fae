"""
Tests for combining fragments, range predicates and text search predicates.
"""

from datetime import timedelta
from itertools import combinations

import pytest

from filtercraft import (
    DEFAULT_PLACEHOLDER,
    BinaryOperator,
    CapabilityMissingError,
    Constant,
    InvalidOperatorError,
    LogicalOperator,
    any_property_contains_text,
    as_lambda,
    between,
    combine,
    register_method,
)
from filtercraft import capabilities

from helpers import placeholders

FRAGMENTS = [
    lambda o: o.customer.first_name == "John",
    lambda p: p.product_name == "Onion",
    lambda order: order.customer.age >= 30,
    lambda o: o.product_name.contains("an"),
    lambda row: row.customer.last_name != "Pettrov",
]

FRAGMENT_SETS = [
    list(subset)
    for size in (1, 2, 3, len(FRAGMENTS))
    for subset in combinations(FRAGMENTS, size)
]


class TestCombine:
    """Test folding fragments with AND/OR."""

    @pytest.mark.parametrize("fragments", FRAGMENT_SETS)
    def test_and_matches_iff_every_fragment_matches(self, fragments, purchases):
        combined = combine(LogicalOperator.AND, fragments).compile()
        singles = [as_lambda(f).compile() for f in fragments]

        for purchase in purchases:
            assert combined(purchase) == all(f(purchase) for f in singles)

    @pytest.mark.parametrize("fragments", FRAGMENT_SETS)
    def test_or_matches_iff_any_fragment_matches(self, fragments, purchases):
        combined = combine(LogicalOperator.OR, fragments).compile()
        singles = [as_lambda(f).compile() for f in fragments]

        for purchase in purchases:
            assert combined(purchase) == any(f(purchase) for f in singles)

    @pytest.mark.parametrize("operator", list(LogicalOperator))
    def test_no_fragments_matches_everything(self, operator, purchases):
        combined = combine(operator, [])

        assert combined.body == Constant(value=True)
        assert all(combined.compile()(p) for p in purchases)

    @pytest.mark.parametrize("operator", list(LogicalOperator))
    def test_single_fragment_is_returned_verbatim(self, operator):
        fragment = as_lambda(lambda o: o.product_name == "Onion")

        assert combine(operator, [fragment]) is fragment

    def test_fragments_share_one_placeholder(self):
        combined = combine(LogicalOperator.OR, FRAGMENTS)

        assert combined.parameter.name == "x"
        assert placeholders(combined) == {"x"}

    def test_left_fold_order(self):
        a, b, c = (as_lambda(f) for f in FRAGMENTS[:3])

        combined = combine(LogicalOperator.AND, [a, b, c])

        body = combined.body
        assert body.operator == BinaryOperator.AND_ALSO
        assert body.left.operator == BinaryOperator.AND_ALSO
        assert str(body.left.left) == "(x.customer.first_name == 'John')"
        assert str(body.left.right) == "(x.product_name == 'Onion')"
        assert str(body.right) == "(x.customer.age >= 30)"

    def test_fragments_are_not_modified(self):
        fragment = as_lambda(lambda o: o.product_name == "Onion")
        before = str(fragment)

        combine(LogicalOperator.OR, [fragment, lambda o: o.product_name == "Tomato"])

        assert str(fragment) == before

    def test_operator_given_as_string(self):
        combined = combine("OR", FRAGMENTS[:2])
        assert combined.body.operator == BinaryOperator.OR_ELSE

    def test_invalid_operator(self):
        with pytest.raises(InvalidOperatorError):
            combine("XOR", FRAGMENTS[:2])

    def test_custom_placeholder(self):
        combined = combine(LogicalOperator.AND, FRAGMENTS[:2], placeholder="entity")
        assert placeholders(combined) == {"entity"}

    def test_default_placeholder_ignores_environment(self, monkeypatch):
        monkeypatch.setenv("FILTERCRAFT_PLACEHOLDER_NAME", "item")

        combined = combine(LogicalOperator.AND, FRAGMENTS[:2])

        assert combined.parameter.name == DEFAULT_PLACEHOLDER == "x"


class TestBetween:
    """Test inclusive range predicates."""

    def test_rendering(self):
        predicate = between(lambda o: o.customer.age, 18, 30)
        assert str(predicate) == "x => ((x.customer.age >= 18) AND (x.customer.age <= 30))"

    def test_inclusive_bounds(self, purchases, now):
        start, end = now - timedelta(days=2), now - timedelta(days=1)
        matches = between(lambda o: o.date_time, start, end).compile()

        assert [p.product_name for p in purchases if matches(p)] == ["Onion", "Banana"]

    @pytest.mark.parametrize("lower,upper", [(0, 100), (15, 15), (16, 31), (31, 30), (40, 10)])
    def test_matches_iff_value_in_range(self, lower, upper, purchases):
        matches = between(lambda o: o.customer.age, lower, upper).compile()

        for purchase in purchases:
            assert matches(purchase) == (lower <= purchase.customer.age <= upper)

    def test_empty_interval_matches_nothing(self, purchases, now):
        matches = between(lambda o: o.date_time, now, now - timedelta(days=5)).compile()
        assert not any(matches(p) for p in purchases)


class TestAnyPropertyContainsText:
    """Test substring search across several fields."""

    def test_no_accessors_matches_nothing(self, purchases):
        predicate = any_property_contains_text("e", [])

        assert predicate.body == Constant(value=False)
        assert not any(predicate.compile()(p) for p in purchases)

    def test_single_accessor_equals_direct_containment(self, purchases):
        matches = any_property_contains_text("an", [lambda o: o.product_name]).compile()

        for purchase in purchases:
            assert matches(purchase) == ("an" in purchase.product_name)

    @pytest.mark.parametrize("text", ["e", "P", "o", "an", "tt", "zz", ""])
    def test_many_accessors_equal_or_of_containment(self, text, purchases):
        accessors = [lambda o: o.customer.first_name, lambda o: o.product_name, lambda o: o.customer.last_name]
        matches = any_property_contains_text(text, accessors).compile()

        for purchase in purchases:
            expected = (
                text in purchase.customer.first_name
                or text in purchase.product_name
                or text in purchase.customer.last_name
            )
            assert matches(purchase) == expected

    def test_case_sensitive(self, purchases):
        matches = any_property_contains_text("E", [lambda o: o.customer.first_name, lambda o: o.product_name]).compile()
        assert not any(matches(p) for p in purchases)

    def test_rendering(self):
        predicate = any_property_contains_text("e", [lambda o: o.customer.first_name, lambda p: p.product_name])
        assert str(predicate) == (
            "x => ((False OR x.customer.first_name.contains('e')) OR x.product_name.contains('e'))"
        )

    def test_missing_contains_capability_fails_before_building(self, monkeypatch):
        monkeypatch.delitem(capabilities._METHODS, (str, "contains"))
        built = []

        with pytest.raises(CapabilityMissingError, match="contains"):
            any_property_contains_text("e", [lambda o: built.append(o) or o.product_name])

        assert built == []


class TestCapabilities:
    """Test the scalar method registry."""

    def test_resolves_through_subclasses(self):
        class Name(str):
            pass

        assert capabilities.resolve_method(Name, "startswith") is str.startswith

    def test_register_method(self, monkeypatch):
        monkeypatch.setattr(capabilities, "_METHODS", dict(capabilities._METHODS))

        class Tags:
            def __init__(self, *tags):
                self.tags = tags

        register_method(Tags, "contains", lambda value, tag: tag in value.tags)
        matches = as_lambda(lambda o: o.tags.contains("red")).compile()

        assert matches(type("Row", (), {"tags": Tags("red", "blue")})())
        assert not matches(type("Row", (), {"tags": Tags("green")})())

    def test_unknown_method(self):
        with pytest.raises(CapabilityMissingError):
            capabilities.resolve_method(int, "contains")

    def test_text_methods_resolved_when_compiled(self, monkeypatch, purchases):
        matches = as_lambda(lambda o: o.product_name.contains("an")).compile()

        def lookup_per_row(*args):
            raise AssertionError("text method looked up while filtering")

        monkeypatch.setattr("filtercraft.query_source.memory_evaluator.resolve_method", lookup_per_row)

        assert [p.product_name for p in purchases if matches(p)] == ["Banana"]
