"""Rule and Policy models.

Policy structure:
    Policy
    ├── name: Unique identity (non-empty)
    ├── description: Free text
    └── rules: tuple[Rule, ...]
        └── Rule
            ├── pattern: Path pattern ("path" in documents)
            ├── effect: "allow" | "deny" (default allow)
            ├── capabilities: frozenset[Capability] (ignored for deny)
            ├── conditions: read-only mapping field -> Condition (AND logic)
            └── description: Optional text

Design principles:
1. Models are frozen; builders return new instances
2. A deny rule vetoes every capability at a matching path
3. Rule order carries no evaluation weight, only listing order
4. Raw condition definitions become typed Conditions at construction
"""

from __future__ import annotations

__all__ = [
    "Policy",
    "Rule",
]

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Self

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from path_acl.exceptions import InvalidPolicyError
from path_acl.pdp.capability import Capability, Effect
from path_acl.pdp.conditions import Condition, conditions_satisfied, to_condition
from path_acl.pdp.matcher import match_path
from path_acl.utils.validation import format_validation_errors


class Rule(BaseModel):
    """A single access rule.

    Attributes:
        pattern: Path pattern the rule applies to (see pdp.matcher).
        effect: ALLOW grants capabilities, DENY vetoes the path.
        capabilities: Capabilities granted by an ALLOW rule.
        conditions: Context field -> Condition, all must hold.
        description: Optional human-readable note.
    """

    pattern: str = Field(validation_alias=AliasChoices("pattern", "path"))
    effect: Effect = Effect.ALLOW
    capabilities: frozenset[Capability] = frozenset()
    conditions: Mapping[str, Condition] = Field(default_factory=lambda: MappingProxyType({}))
    description: str | None = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="forbid")

    @field_validator("pattern", mode="after")
    @classmethod
    def reject_empty_pattern(cls, v: str) -> str:
        """Reject empty or whitespace-only patterns."""
        if not v.strip():
            raise ValueError("Rule pattern cannot be empty or whitespace-only")
        return v

    @field_validator("effect", mode="before")
    @classmethod
    def lowercase_effect(cls, v: Any) -> Any:
        """Accept "Allow", "DENY", etc. from documents."""
        if isinstance(v, str) and not isinstance(v, Effect):
            return v.strip().lower()
        return v

    @field_validator("capabilities", mode="before")
    @classmethod
    def parse_capabilities(cls, v: Any) -> frozenset[Capability]:
        """Parse capability names case-insensitively.

        A single name is accepted in place of a list.
        """
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = [v]

        parsed: set[Capability] = set()
        for item in v:
            if isinstance(item, Capability):
                parsed.add(item)
            elif isinstance(item, str):
                parsed.add(Capability.from_string(item))
            else:
                raise ValueError(f"Capability must be a string, got {type(item).__name__}")
        return frozenset(parsed)

    @field_validator("conditions", mode="before")
    @classmethod
    def build_conditions(cls, v: Any) -> dict[str, Condition]:
        """Convert raw condition definitions to Condition variants."""
        if v is None:
            return {}
        if not isinstance(v, Mapping):
            raise ValueError("Conditions must be a mapping of field name to definition")

        built: dict[str, Condition] = {}
        for field, definition in v.items():
            if not isinstance(field, str):
                raise ValueError(f"Condition field must be a string, got {type(field).__name__}")
            built[field] = to_condition(definition)
        return built

    @field_validator("conditions", mode="after")
    @classmethod
    def freeze_conditions(cls, v: Mapping[str, Condition]) -> Mapping[str, Condition]:
        """Expose conditions as a read-only view."""
        return MappingProxyType(dict(v))

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def allow(cls, pattern: str, *capabilities: Capability | str) -> Self:
        """Create an ALLOW rule, optionally with its capabilities."""
        return cls(pattern=pattern, effect=Effect.ALLOW, capabilities=capabilities)

    @classmethod
    def deny(cls, pattern: str) -> Self:
        """Create a DENY rule. Deny rules need no capabilities."""
        return cls(pattern=pattern, effect=Effect.DENY)

    @classmethod
    def from_dict(cls, data: Any) -> Self:
        """Build a rule from a document mapping.

        Args:
            data: Mapping with "path" and optional "effect", "capabilities",
                "conditions", "description".

        Raises:
            InvalidPolicyError: If data is not a mapping or fails validation.
        """
        if not isinstance(data, Mapping):
            raise InvalidPolicyError(f"Each policy rule must be a mapping, got {type(data).__name__}")
        if not isinstance(data.get("path"), str):
            raise InvalidPolicyError("Each policy rule must have a string 'path' field")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidPolicyError(
                "Invalid rule definition", errors=format_validation_errors(e)
            ) from e

    def _replace(self, **changes: Any) -> Self:
        # model_copy() skips validation, so rebuild through the validators
        return type(self).model_validate({**dict(self), **changes})

    def with_capabilities(self, *capabilities: Capability | str) -> Self:
        """Return a copy granting exactly these capabilities."""
        return self._replace(capabilities=capabilities)

    def when(self, field: str, definition: Any) -> Self:
        """Return a copy with one more condition on a context field.

        Args:
            field: Context key to test.
            definition: Scalar, sequence, callable or Condition.
        """
        return self._replace(conditions={**self.conditions, field: definition})

    def with_description(self, description: str) -> Self:
        """Return a copy with a new description."""
        return self._replace(description=description)

    # -------------------------------------------------------------------------
    # Evaluation helpers
    # -------------------------------------------------------------------------

    def matches_path(self, path: str, context: Mapping[str, Any] | None = None) -> bool:
        """Return True if the pattern fully matches path under context."""
        return match_path(self.pattern, path, context)

    def has_capability(self, capability: Capability) -> bool:
        """Return True if any granted capability implies `capability`."""
        return any(granted.implies(capability) for granted in self.capabilities)

    def conditions_satisfied(self, context: Mapping[str, Any] | None = None) -> bool:
        """Return True if every condition holds for context."""
        return conditions_satisfied(self.conditions, context)

    @property
    def is_allow(self) -> bool:
        return self.effect is Effect.ALLOW

    @property
    def is_deny(self) -> bool:
        return self.effect is Effect.DENY

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the policy document format.

        Capabilities are listed in declaration order. Empty conditions and
        a missing description are omitted.

        Raises:
            InvalidPolicyError: If a condition is a Predicate.
        """
        data: dict[str, Any] = {
            "path": self.pattern,
            "effect": self.effect.value,
            "capabilities": [c.value for c in Capability if c in self.capabilities],
        }
        if self.conditions:
            data["conditions"] = {field: c.to_definition() for field, c in self.conditions.items()}
        if self.description is not None:
            data["description"] = self.description
        return data


class Policy(BaseModel):
    """A named, ordered collection of rules.

    Attributes:
        name: Unique identity used by registries and repositories.
        description: Free text.
        rules: Rules in authoring order.
    """

    name: str
    description: str = ""
    rules: tuple[Rule, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name", mode="after")
    @classmethod
    def reject_empty_name(cls, v: str) -> str:
        """Reject empty or whitespace-only names."""
        if not v.strip():
            raise ValueError("Policy name cannot be empty or whitespace-only")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def none_description(cls, v: Any) -> Any:
        """Treat a null description (e.g. bare YAML key) as empty."""
        return "" if v is None else v

    @field_validator("rules", mode="before")
    @classmethod
    def require_rule_list(cls, v: Any) -> Any:
        """Rules must be a list; a mapping or string is a structural error."""
        if v is None:
            return ()
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"Policy rules must be a list, got {type(v).__name__}")
        return v

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def create(cls, name: str, *rules: Rule, description: str = "") -> Self:
        """Create a policy from rule objects."""
        return cls(name=name, description=description, rules=rules)

    @classmethod
    def from_dict(cls, data: Any, *, source: str | None = None) -> Self:
        """Build a policy from a document mapping.

        Args:
            data: Mapping with "name", optional "description" and "rules".
            source: File or label for error messages.

        Raises:
            InvalidPolicyError: If data is not a mapping, has no string name,
                or fails validation.
        """
        where = f" in {source}" if source else ""

        if not isinstance(data, Mapping):
            raise InvalidPolicyError(
                f"Policy definition{where} must be a mapping, got {type(data).__name__}",
                source=source,
            )
        if not isinstance(data.get("name"), str):
            raise InvalidPolicyError(
                f"Policy definition{where} must have a string 'name' field", source=source
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidPolicyError(
                f"Invalid policy {data['name']!r}{where}",
                source=source,
                errors=format_validation_errors(e),
            ) from e

    def with_rule(self, rule: Rule) -> Self:
        """Return a copy with `rule` appended."""
        return type(self)(name=self.name, description=self.description, rules=(*self.rules, rule))

    def with_rules(self, rules: Iterable[Rule]) -> Self:
        """Return a copy with `rules` appended in order."""
        return type(self)(name=self.name, description=self.description, rules=(*self.rules, *rules))

    def with_description(self, description: str) -> Self:
        """Return a copy with a new description."""
        return type(self)(name=self.name, description=description, rules=self.rules)

    def renamed(self, name: str) -> Self:
        """Return a copy under a different name."""
        return type(self)(name=name, description=self.description, rules=self.rules)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def allow_rules(self) -> tuple[Rule, ...]:
        return tuple(r for r in self.rules if r.is_allow)

    @property
    def deny_rules(self) -> tuple[Rule, ...]:
        return tuple(r for r in self.rules if r.is_deny)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the policy document format."""
        return {
            "name": self.name,
            "description": self.description,
            "rules": [rule.to_dict() for rule in self.rules],
        }
