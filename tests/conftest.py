"""Shared fixtures for path-acl tests."""

from collections.abc import Iterator

import pytest

from path_acl.pdp import Capability, EvaluationService, Policy, Rule
from path_acl.telemetry.system.system_logger import reset_system_logger


@pytest.fixture
def service() -> EvaluationService:
    """Evaluation service with default collaborators."""
    return EvaluationService()


@pytest.fixture
def users_policy() -> Policy:
    """Allow read on any user, deny everything on the admin user."""
    return Policy.create(
        "users",
        Rule.allow("/users/*", Capability.READ),
        Rule.deny("/users/admin"),
        description="User directory access",
    )


@pytest.fixture
def docs_policy() -> Policy:
    """Overlapping allow rules on /docs."""
    return Policy.create(
        "docs",
        Rule.allow("/docs/*", Capability.READ),
        Rule.allow("/docs/readme", Capability.UPDATE),
    )


@pytest.fixture(autouse=True)
def _fresh_system_logger() -> Iterator[None]:
    """Never share the system logger singleton between tests."""
    reset_system_logger()
    yield
    reset_system_logger()
