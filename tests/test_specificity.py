"""Unit tests for rule pattern specificity scoring.

Only the relative ordering is load-bearing: literal > variable > * > **,
with segment count breaking ties on weight.
"""

import pytest

from path_acl.pdp import Capability, EvaluationService, Policy, Rule
from path_acl.pdp.specificity import Specificity, SpecificityCalculator, calculate_specificity


class TestCalculateSpecificity:
    """Tests for calculate_specificity()."""

    @pytest.mark.parametrize(
        "pattern, expected",
        [
            ("/users/admin", Specificity(200, 2)),
            ("/users/${id}", Specificity(150, 2)),
            ("/users/*", Specificity(110, 2)),
            ("/users/**", Specificity(101, 2)),
            ("/**", Specificity(1, 1)),
            ("/", Specificity(0, 0)),
        ],
    )
    def test_scores(self, pattern: str, expected: Specificity) -> None:
        assert calculate_specificity(pattern) == expected

    def test_literal_beats_variable_beats_star_beats_glob(self) -> None:
        literal = calculate_specificity("/a/b")
        variable = calculate_specificity("/a/${x}")
        star = calculate_specificity("/a/*")
        glob = calculate_specificity("/a/**")
        assert literal > variable > star > glob

    def test_segment_count_breaks_weight_ties(self) -> None:
        # Same weight, more segments wins
        short = Specificity(100, 1)
        long = Specificity(100, 2)
        assert long > short

    def test_partial_wildcard_segment_counts_as_wildcard(self) -> None:
        assert calculate_specificity("/files/*.txt") == Specificity(110, 2)

    def test_scoring_ignores_extra_separators(self) -> None:
        assert calculate_specificity("//a//b/") == calculate_specificity("/a/b")

    def test_calculator_wraps_function(self) -> None:
        assert SpecificityCalculator().calculate("/a/*") == calculate_specificity("/a/*")


class TestCandidateOrdering:
    """Tests for how specificity orders candidates during evaluation."""

    def test_most_specific_allow_decides(self, service: EvaluationService) -> None:
        broad = Rule.allow("/docs/**", Capability.READ).with_description("broad")
        narrow = Rule.allow("/docs/guide", Capability.READ).with_description("narrow")
        policy = Policy.create("docs", broad, narrow)

        result = service.evaluate([policy], Capability.READ, "/docs/guide")

        assert result.allowed
        assert result.matched_rule == narrow

    def test_ties_keep_evaluation_order(self, service: EvaluationService) -> None:
        first = Rule.allow("/a/*", Capability.READ).with_description("first")
        second = Rule.allow("/*/b", Capability.READ).with_description("second")
        p1 = Policy.create("p1", first)
        p2 = Policy.create("p2", second)

        result = service.evaluate([p1, p2], Capability.READ, "/a/b")
        assert result.matched_rule == first
        assert result.matched_policy == p1

        result = service.evaluate([p2, p1], Capability.READ, "/a/b")
        assert result.matched_rule == second

    def test_matching_rules_are_sorted(self, service: EvaluationService) -> None:
        policy = Policy.create(
            "mixed",
            Rule.allow("/**", Capability.READ),
            Rule.allow("/x/*", Capability.READ),
            Rule.allow("/x/y", Capability.READ),
            Rule.allow("/x/${id}", Capability.READ),
        )

        matched = service.get_matching_rules([policy], Capability.READ, "/x/y", {"id": "y"})

        assert [m.pattern for m in matched] == ["/x/y", "/x/${id}", "/x/*", "/**"]
