"""Unit tests for rule conditions."""

import pytest

from path_acl.exceptions import InvalidPolicyError
from path_acl.pdp.conditions import (
    ConditionEvaluator,
    Equals,
    OneOf,
    Predicate,
    conditions_satisfied,
    to_condition,
)


class TestToCondition:
    """Tests for to_condition() variant selection."""

    def test_scalar_becomes_equals(self) -> None:
        assert to_condition("admin") == Equals("admin")

    @pytest.mark.parametrize("definition", [["a", "b"], ("a", "b")])
    def test_sequence_becomes_one_of(self, definition: object) -> None:
        assert to_condition(definition) == OneOf(("a", "b"))

    def test_set_becomes_one_of(self) -> None:
        condition = to_condition({"a"})
        assert isinstance(condition, OneOf)
        assert condition.values == ("a",)

    def test_callable_becomes_predicate(self) -> None:
        condition = to_condition(str.isdigit)
        assert isinstance(condition, Predicate)

    def test_existing_condition_passes_through(self) -> None:
        condition = Equals(1)
        assert to_condition(condition) is condition

    def test_none_becomes_equals_none(self) -> None:
        assert to_condition(None) == Equals(None)


class TestEquals:
    """Tests for exact type-and-value equality."""

    def test_same_value_matches(self) -> None:
        assert Equals("admin").evaluate("admin")

    def test_different_value_fails(self) -> None:
        assert not Equals("admin").evaluate("user")

    def test_int_does_not_equal_string(self) -> None:
        assert not Equals(1).evaluate("1")

    def test_true_does_not_equal_one(self) -> None:
        assert not Equals(True).evaluate(1)
        assert not Equals(1).evaluate(True)

    def test_int_does_not_equal_float(self) -> None:
        assert not Equals(1).evaluate(1.0)

    def test_to_definition_returns_value(self) -> None:
        assert Equals(5).to_definition() == 5


class TestOneOf:
    """Tests for exact membership."""

    def test_member_matches(self) -> None:
        assert OneOf(("eu", "us")).evaluate("us")

    def test_non_member_fails(self) -> None:
        assert not OneOf(("eu", "us")).evaluate("apac")

    def test_membership_is_type_exact(self) -> None:
        assert not OneOf((1, 2)).evaluate(True)
        assert not OneOf(("1",)).evaluate(1)

    def test_empty_never_matches(self) -> None:
        assert not OneOf(()).evaluate(None)

    def test_to_definition_returns_list(self) -> None:
        assert OneOf(("a", "b")).to_definition() == ["a", "b"]


class TestPredicate:
    """Tests for callable conditions."""

    def test_result_is_coerced_to_bool(self) -> None:
        assert Predicate(lambda v: v).evaluate("non-empty") is True
        assert Predicate(lambda v: v).evaluate("") is False

    def test_exceptions_propagate(self) -> None:
        def boom(value: object) -> bool:
            raise RuntimeError("predicate failed")

        with pytest.raises(RuntimeError, match="predicate failed"):
            Predicate(boom).evaluate(1)

    def test_cannot_be_serialized(self) -> None:
        def is_even(value: int) -> bool:
            return value % 2 == 0

        with pytest.raises(InvalidPolicyError, match="is_even"):
            Predicate(is_even).to_definition()


class TestConditionEvaluator:
    """Tests for AND evaluation over a context."""

    def test_empty_conditions_always_hold(self) -> None:
        assert ConditionEvaluator().evaluate_all({}, None)

    def test_all_must_hold(self) -> None:
        conditions = {"role": Equals("admin"), "region": OneOf(("eu",))}
        assert conditions_satisfied(conditions, {"role": "admin", "region": "eu"})
        assert not conditions_satisfied(conditions, {"role": "admin", "region": "us"})

    def test_missing_field_evaluates_as_none(self) -> None:
        assert conditions_satisfied({"tenant": Equals(None)}, {})
        assert not conditions_satisfied({"tenant": Equals("acme")}, {})

    def test_short_circuits_on_first_failure(self) -> None:
        calls: list[object] = []

        def record(value: object) -> bool:
            calls.append(value)
            return True

        conditions = {"role": Equals("admin"), "other": Predicate(record)}
        assert not conditions_satisfied(conditions, {"role": "user", "other": 1})
        assert calls == []
