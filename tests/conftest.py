"""Shared pytest fixtures and configuration.

This file is automatically loaded by pytest and provides fixtures
accessible to all tests.
"""

import os

import pytest
from hypothesis import HealthCheck, settings

from tests import helpers

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=50,  # Faster for CI
    deadline=None,  # No deadlines for slow tests
    suppress_health_check=[HealthCheck.too_slow],
)

settings.register_profile(
    "dev",
    max_examples=10,  # Very fast for local development
    deadline=500,  # 500ms deadline for local tests
)

settings.register_profile(
    "thorough",
    max_examples=1000,  # Comprehensive for nightly runs
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))

# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def sample_file():
    """File descriptor of package "a" (tagged messages, enums, maps)."""
    return helpers.SAMPLE_FILE


@pytest.fixture(scope="session")
def internal_file():
    """File descriptor of package "b.internal"."""
    return helpers.INTERNAL_FILE


@pytest.fixture(scope="session")
def broken_file():
    """File descriptor carrying malformed version tags."""
    return helpers.BROKEN_FILE


@pytest.fixture
def descriptor_set_path(tmp_path):
    """Descriptor set with the options file and packages "a" and "b.internal"."""
    path = tmp_path / "schema.pb"
    path.write_bytes(
        helpers.descriptor_set_bytes(
            helpers.OPTIONS_PROTO,
            helpers.SAMPLE_PROTO,
            helpers.INTERNAL_PROTO,
        )
    )
    return path


@pytest.fixture(autouse=True)
def _clean_versionpb_env(monkeypatch):
    """Keep ambient VERSIONPB_* variables from leaking into tests."""
    for name in list(os.environ):
        if name.startswith("VERSIONPB_"):
            monkeypatch.delenv(name, raising=False)
