# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

Operators are stateless and the registry is read-only once built, so a
single session-wide registry is shared by every test. Tests that need to
register their own operators build a fresh OperatorRegistry instead.
"""

from __future__ import annotations

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from pipeforge.contracts.context import ExecutionContext
from pipeforge.core.config import ExecutionSettings, PipeforgeSettings
from pipeforge.core.security.web import DomainWhitelist
from pipeforge.engine import PipeExecutor
from pipeforge.operators.registry import OperatorRegistry, register_builtin_operators

# =============================================================================
# Hypothesis Profiles
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Registry / Engine Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def registry() -> OperatorRegistry:
    """Registry with every built-in operator and alias."""
    return register_builtin_operators(OperatorRegistry())


@pytest.fixture
def executor(registry: OperatorRegistry) -> PipeExecutor:
    return PipeExecutor(registry)


@pytest.fixture
def fast_executor(registry: OperatorRegistry) -> PipeExecutor:
    """Executor with short timeouts for tests that exercise them."""
    return PipeExecutor(
        registry,
        PipeforgeSettings(execution=ExecutionSettings(operator_timeout_seconds=0.2, pipe_timeout_seconds=5)),
    )


@pytest.fixture
def ctx() -> ExecutionContext:
    """Minimal execution context allowing fetches to api.example.com."""
    return ExecutionContext(
        node_id="test-node",
        domain_whitelist=DomainWhitelist(["api.example.com"]),
        http_timeout=5.0,
    )
