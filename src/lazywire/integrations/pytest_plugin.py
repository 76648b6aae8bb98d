from __future__ import annotations

import pytest

from lazywire.registry import Registry

_MARKER_NAME = "lazywire"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        f"{_MARKER_NAME}(max_initialization_duration_ms): configure the lazywire_registry fixture",
    )


@pytest.fixture()
def lazywire_registry(request: pytest.FixtureRequest) -> Registry:
    """Create a per-test registry.

    The registry is configured from ``LAZYWIRE_*`` environment variables. Tests
    can override the timeout with
    ``@pytest.mark.lazywire(max_initialization_duration_ms=...)``.

    Returns:
        A new, empty ``Registry``.

    """
    marker = request.node.get_closest_marker(_MARKER_NAME)
    if marker is None or "max_initialization_duration_ms" not in marker.kwargs:
        return Registry.from_settings()
    return Registry(max_initialization_duration_ms=marker.kwargs["max_initialization_duration_ms"])
