"""Tests for policy file helpers (parse, load, dump, save)."""

import json
from pathlib import Path

import pytest
import yaml

from path_acl.exceptions import InvalidPolicyError, RepositoryError
from path_acl.pdp import Capability, Policy, Rule
from path_acl.utils.policy import dump_policies, load_policies, load_policy, parse_policies, save_policies


@pytest.fixture
def conditional_policy() -> Policy:
    return Policy.create(
        "tenants",
        Rule.allow("/t/${tenant}/**", Capability.READ, Capability.LIST).when("plan", ["pro", "team"]),
        Rule.deny("/t/${tenant}/billing").with_description("Billing is managed elsewhere"),
        description="Tenant scoped access",
    )


class TestParsePolicies:
    """Tests for parse_policies()."""

    def test_mapping_gives_one_policy(self) -> None:
        assert [p.name for p in parse_policies({"name": "a"})] == ["a"]

    def test_list_gives_policies_in_order(self) -> None:
        assert [p.name for p in parse_policies([{"name": "b"}, {"name": "a"}])] == ["b", "a"]

    @pytest.mark.parametrize("data, shape", [(None, "empty document"), ("text", "str"), (3, "int")])
    def test_rejects_other_shapes(self, data: object, shape: str) -> None:
        with pytest.raises(InvalidPolicyError, match=shape):
            parse_policies(data, source="x.yml")


class TestLoadPolicies:
    """Tests for load_policies() and load_policy()."""

    def test_load_json_and_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "a.json").write_text(json.dumps({"name": "a"}))
        (tmp_path / "b.yaml").write_text("- name: b\n- name: c\n")

        assert [p.name for p in load_policies(tmp_path / "a.json")] == ["a"]
        assert [p.name for p in load_policies(tmp_path / "b.yaml")] == ["b", "c"]

    def test_unsupported_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "policy.toml"
        path.write_text("")

        with pytest.raises(RepositoryError, match="Unsupported policy file type"):
            load_policies(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RepositoryError, match="Policy file not found"):
            load_policies(tmp_path / "nope.json")

    def test_load_policy_requires_exactly_one(self, tmp_path: Path) -> None:
        path = tmp_path / "two.json"
        path.write_text(json.dumps([{"name": "a"}, {"name": "b"}]))

        with pytest.raises(InvalidPolicyError, match="exactly one"):
            load_policy(path)


class TestDumpAndSave:
    """Tests for dump_policies() and save_policies()."""

    def test_single_policy_dumped_as_object(self, conditional_policy: Policy) -> None:
        data = json.loads(dump_policies([conditional_policy]))

        assert data["name"] == "tenants"
        assert data["rules"][0]["conditions"] == {"plan": ["pro", "team"]}

    def test_several_policies_dumped_as_list(self, users_policy: Policy, docs_policy: Policy) -> None:
        data = yaml.safe_load(dump_policies([users_policy, docs_policy], fmt="yaml"))

        assert [d["name"] for d in data] == ["users", "docs"]

    def test_unknown_format(self, users_policy: Policy) -> None:
        with pytest.raises(ValueError, match="Unknown policy format"):
            dump_policies([users_policy], fmt="xml")

    @pytest.mark.parametrize("filename", ["out.json", "out.yml"])
    def test_save_then_load(self, tmp_path: Path, conditional_policy: Policy, filename: str) -> None:
        path = tmp_path / filename

        save_policies([conditional_policy], path)

        assert load_policy(path) == conditional_policy
