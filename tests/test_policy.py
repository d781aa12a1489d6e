"""Unit tests for the Rule and Policy models."""

import pytest
from pydantic import ValidationError

from path_acl.exceptions import InvalidPolicyError
from path_acl.pdp import Capability, Effect, Equals, OneOf, Policy, Predicate, Rule


class TestRuleConstruction:
    """Tests for building rules."""

    def test_allow_with_capabilities(self) -> None:
        rule = Rule.allow("/users/*", Capability.READ, "list")

        assert rule.effect is Effect.ALLOW
        assert rule.capabilities == frozenset({Capability.READ, Capability.LIST})
        assert rule.conditions == {}
        assert rule.description is None

    def test_deny_has_no_capabilities(self) -> None:
        rule = Rule.deny("/users/admin")

        assert rule.is_deny
        assert rule.capabilities == frozenset()

    def test_effect_is_case_insensitive(self) -> None:
        assert Rule(pattern="/x", effect="DENY").effect is Effect.DENY

    def test_capabilities_are_case_insensitive(self) -> None:
        assert Rule(pattern="/x", capabilities=["Read", " UPDATE "]).capabilities == {
            Capability.READ,
            Capability.UPDATE,
        }

    def test_single_capability_string_accepted(self) -> None:
        assert Rule(pattern="/x", capabilities="read").capabilities == {Capability.READ}

    def test_unknown_capability_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Rule(pattern="/x", capabilities=["execute"])

    def test_empty_pattern_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be empty"):
            Rule(pattern="   ")

    def test_path_alias_accepted(self) -> None:
        assert Rule.model_validate({"path": "/a"}).pattern == "/a"

    def test_rule_is_frozen(self) -> None:
        rule = Rule.allow("/a", Capability.READ)
        with pytest.raises(ValidationError):
            rule.pattern = "/b"  # type: ignore[misc]

    def test_raw_conditions_become_variants(self) -> None:
        rule = Rule(
            pattern="/x",
            conditions={"role": "admin", "region": ["eu", "us"], "id": str.isdigit},
        )

        assert rule.conditions["role"] == Equals("admin")
        assert rule.conditions["region"] == OneOf(("eu", "us"))
        assert isinstance(rule.conditions["id"], Predicate)

    def test_conditions_are_read_only(self) -> None:
        """Given a conditional rule, its conditions cannot be rewritten."""
        # Arrange
        rule = Rule.allow("/x", Capability.READ).when("role", "admin")

        # Act / Assert
        with pytest.raises(TypeError):
            rule.conditions["role"] = Equals("guest")  # type: ignore[index]
        with pytest.raises(TypeError):
            del rule.conditions["role"]  # type: ignore[attr-defined]
        assert not rule.conditions_satisfied({"role": "guest"})
        assert rule.conditions_satisfied({"role": "admin"})

    def test_source_mapping_is_copied(self) -> None:
        definitions = {"role": "admin"}
        rule = Rule(pattern="/x", conditions=definitions)

        definitions["role"] = "guest"

        assert rule.conditions == {"role": Equals("admin")}


class TestRuleBuilders:
    """Tests for copy-on-write builders."""

    def test_with_capabilities_replaces(self) -> None:
        original = Rule.allow("/a", Capability.READ)
        updated = original.with_capabilities(Capability.UPDATE)

        assert updated.capabilities == {Capability.UPDATE}
        assert original.capabilities == {Capability.READ}

    def test_when_adds_condition(self) -> None:
        original = Rule.allow("/a", Capability.READ)
        updated = original.when("role", "admin").when("tier", ["gold"])

        assert set(updated.conditions) == {"role", "tier"}
        assert original.conditions == {}

    def test_when_overrides_same_field(self) -> None:
        rule = Rule.allow("/a").when("role", "user").when("role", "admin")
        assert rule.conditions == {"role": Equals("admin")}

    def test_with_description(self) -> None:
        rule = Rule.deny("/a").with_description("blocked")
        assert rule.description == "blocked"
        assert rule.is_deny


class TestRuleHelpers:
    """Tests for rule evaluation helpers."""

    def test_admin_implies_every_capability(self) -> None:
        rule = Rule.allow("/a", Capability.ADMIN)
        assert all(rule.has_capability(c) for c in Capability)

    def test_has_capability_is_exact_otherwise(self) -> None:
        rule = Rule.allow("/a", Capability.READ)
        assert rule.has_capability(Capability.READ)
        assert not rule.has_capability(Capability.LIST)

    def test_matches_path_uses_context(self) -> None:
        rule = Rule.allow("/t/${tenant}/**", Capability.READ)
        assert rule.matches_path("/t/acme/docs", {"tenant": "acme"})
        assert not rule.matches_path("/t/other/docs", {"tenant": "acme"})

    def test_conditions_satisfied(self) -> None:
        rule = Rule.allow("/a").when("role", "admin")
        assert rule.conditions_satisfied({"role": "admin"})
        assert not rule.conditions_satisfied({})


class TestRuleFromDict:
    """Tests for Rule.from_dict()."""

    def test_full_definition(self) -> None:
        rule = Rule.from_dict(
            {
                "path": "/users/*",
                "effect": "allow",
                "capabilities": ["read"],
                "conditions": {"role": "admin"},
                "description": "Readers",
            }
        )

        assert rule.pattern == "/users/*"
        assert rule.capabilities == {Capability.READ}
        assert rule.conditions == {"role": Equals("admin")}
        assert rule.description == "Readers"

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(InvalidPolicyError, match="must be a mapping"):
            Rule.from_dict(["/a"])

    def test_requires_string_path(self) -> None:
        with pytest.raises(InvalidPolicyError, match="'path'"):
            Rule.from_dict({"pattern": 5})

    def test_validation_errors_are_listed(self) -> None:
        with pytest.raises(InvalidPolicyError) as exc_info:
            Rule.from_dict({"path": "/a", "effect": "maybe"})

        assert exc_info.value.errors
        assert exc_info.value.errors[0].startswith("effect:")

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(InvalidPolicyError):
            Rule.from_dict({"path": "/a", "priority": 1})


class TestRuleToDict:
    """Tests for Rule.to_dict()."""

    def test_minimal_rule(self) -> None:
        assert Rule.deny("/a").to_dict() == {"path": "/a", "effect": "deny", "capabilities": []}

    def test_capabilities_in_declaration_order(self) -> None:
        rule = Rule.allow("/a", Capability.DELETE, Capability.READ)
        assert rule.to_dict()["capabilities"] == ["read", "delete"]

    def test_conditions_and_description_serialized(self) -> None:
        rule = Rule.allow("/a", Capability.READ).when("region", ["eu"]).with_description("EU")
        data = rule.to_dict()

        assert data["conditions"] == {"region": ["eu"]}
        assert data["description"] == "EU"

    def test_round_trip_through_from_dict(self) -> None:
        rule = Rule.allow("/a/${id}", Capability.UPDATE).when("role", "owner")
        assert Rule.from_dict(rule.to_dict()) == rule

    def test_predicate_cannot_be_serialized(self) -> None:
        rule = Rule.allow("/a").when("id", str.isdigit)
        with pytest.raises(InvalidPolicyError):
            rule.to_dict()


class TestPolicy:
    """Tests for the Policy model and builders."""

    def test_create(self, users_policy: Policy) -> None:
        assert users_policy.name == "users"
        assert users_policy.description == "User directory access"
        assert len(users_policy.rules) == 2

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="cannot be empty"):
            Policy(name=" ")

    def test_null_description_becomes_empty(self) -> None:
        assert Policy(name="p", description=None).description == ""

    def test_rules_must_be_a_list(self) -> None:
        with pytest.raises(ValidationError, match="must be a list"):
            Policy(name="p", rules={"path": "/a"})

    def test_with_rule_returns_new_policy(self, users_policy: Policy) -> None:
        extra = Rule.allow("/groups/*", Capability.LIST)
        updated = users_policy.with_rule(extra)

        assert updated.rules[-1] == extra
        assert len(users_policy.rules) == 2
        assert updated.name == users_policy.name

    def test_with_rules_appends_in_order(self) -> None:
        a = Rule.allow("/a")
        b = Rule.allow("/b")
        policy = Policy.create("p").with_rules([a, b])
        assert policy.rules == (a, b)

    def test_renamed_and_with_description(self, users_policy: Policy) -> None:
        copy = users_policy.renamed("people").with_description("People")

        assert copy.name == "people"
        assert copy.description == "People"
        assert copy.rules == users_policy.rules

    def test_allow_and_deny_rules(self, users_policy: Policy) -> None:
        assert [r.pattern for r in users_policy.allow_rules] == ["/users/*"]
        assert [r.pattern for r in users_policy.deny_rules] == ["/users/admin"]


class TestPolicyFromDict:
    """Tests for Policy.from_dict()."""

    def test_document(self) -> None:
        policy = Policy.from_dict(
            {
                "name": "users",
                "description": "User access",
                "rules": [
                    {"path": "/users/*", "capabilities": ["read"]},
                    {"path": "/users/admin", "effect": "deny"},
                ],
            }
        )

        assert policy.name == "users"
        assert policy.rules[0].capabilities == {Capability.READ}
        assert policy.rules[1].is_deny

    def test_missing_rules_gives_empty_policy(self) -> None:
        assert Policy.from_dict({"name": "empty"}).rules == ()

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(InvalidPolicyError, match="must be a mapping"):
            Policy.from_dict("users")

    def test_requires_string_name(self) -> None:
        with pytest.raises(InvalidPolicyError, match="'name'"):
            Policy.from_dict({"rules": []})

    def test_source_in_message(self) -> None:
        with pytest.raises(InvalidPolicyError) as exc_info:
            Policy.from_dict({"name": "p", "rules": [{"path": ""}]}, source="policies.yml")

        error = exc_info.value
        assert error.source == "policies.yml"
        assert "policies.yml" in str(error)
        assert any(line.startswith("rules.0") for line in error.errors)

    def test_round_trip(self, users_policy: Policy) -> None:
        assert Policy.from_dict(users_policy.to_dict()) == users_policy
