"""Evaluation result model.

Three outcomes exist:
- allowed:        an ALLOW rule granted the capability
- implicit deny:  nothing applied ("No matching rule found")
- explicit deny:  a DENY rule matched and vetoed the request

Results are frozen and built through the factories below. A result that
is both allowed and explicitly denied is rejected by validation.
"""

from __future__ import annotations

__all__ = ["EvaluationResult"]

from collections.abc import Iterable
from typing import Self

from pydantic import BaseModel, ConfigDict, model_validator

from path_acl.constants import REASON_ALLOWED, REASON_EXPLICIT_DENY, REASON_NO_MATCH
from path_acl.pdp.policy import Policy, Rule


class EvaluationResult(BaseModel):
    """Outcome of one evaluate() call.

    Attributes:
        allowed: True if access is granted.
        explicit_deny: True if a DENY rule decided the outcome.
        matched_rule: Deciding rule, None for implicit deny.
        matched_policy: Policy that holds matched_rule.
        reason: Human-readable explanation, always set.
        evaluated_policies: Every policy considered, in input order.
    """

    allowed: bool
    explicit_deny: bool = False
    matched_rule: Rule | None = None
    matched_policy: Policy | None = None
    reason: str
    evaluated_policies: tuple[Policy, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_consistency(self) -> Self:
        """Reject outcomes that cannot occur."""
        if self.allowed and self.explicit_deny:
            raise ValueError("A result cannot be both allowed and explicitly denied")
        if self.allowed and self.matched_rule is None:
            raise ValueError("An allowed result must carry the matched rule")
        if self.explicit_deny and self.matched_rule is None:
            raise ValueError("An explicit deny must carry the denying rule")
        return self

    @classmethod
    def allow(
        cls,
        rule: Rule,
        policy: Policy,
        evaluated_policies: Iterable[Policy] = (),
        reason: str = REASON_ALLOWED,
    ) -> Self:
        """Access granted by `rule` from `policy`."""
        return cls(
            allowed=True,
            matched_rule=rule,
            matched_policy=policy,
            reason=reason,
            evaluated_policies=tuple(evaluated_policies),
        )

    @classmethod
    def deny(
        cls,
        reason: str = REASON_NO_MATCH,
        evaluated_policies: Iterable[Policy] = (),
    ) -> Self:
        """Implicit deny: no rule applied."""
        return cls(
            allowed=False,
            reason=reason,
            evaluated_policies=tuple(evaluated_policies),
        )

    @classmethod
    def deny_explicitly(
        cls,
        rule: Rule,
        policy: Policy,
        evaluated_policies: Iterable[Policy] = (),
        reason: str = REASON_EXPLICIT_DENY,
    ) -> Self:
        """Access vetoed by a DENY `rule` from `policy`."""
        return cls(
            allowed=False,
            explicit_deny=True,
            matched_rule=rule,
            matched_policy=policy,
            reason=reason,
            evaluated_policies=tuple(evaluated_policies),
        )

    @property
    def is_denied(self) -> bool:
        return not self.allowed

    @property
    def decision(self) -> str:
        """Short label for logs: "allow", "deny" or "explicit_deny"."""
        if self.allowed:
            return "allow"
        return "explicit_deny" if self.explicit_deny else "deny"
