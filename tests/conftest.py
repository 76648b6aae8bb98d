"""Shared pytest fixtures for lazywire tests."""

import pytest

from lazywire.dependencies import DependencyDeclarations
from lazywire.registry import Registry

pytest_plugins = ["lazywire.integrations.pytest_plugin"]


@pytest.fixture()
def registry() -> Registry:
    """Registry with the default timeout."""
    return Registry()


@pytest.fixture()
def fast_registry() -> Registry:
    """Registry with a short timeout for circular dependency tests."""
    return Registry(max_initialization_duration_ms=100)


@pytest.fixture()
def store() -> DependencyDeclarations:
    """Isolated dependency declarations store."""
    return DependencyDeclarations()
