"""Circular dependency detection.

Synchronous initializers that request each other are caught after a few
nested calls. Asynchronous initializers that wait on each other are caught
when the registry timeout elapses.
"""

from __future__ import annotations

import asyncio
import logging

from lazywire import LazyWireCircularDependencyError, Registry

# Detection is also reported through logging; keep the example output on stdout.
logging.getLogger("lazywire").setLevel(logging.ERROR)


def sync_cycle() -> None:
    registry = Registry()
    registry.add("left", lambda: ("left", registry.get("right")))
    registry.add("right", lambda: ("right", registry.get("left")))

    try:
        registry.get("left")
    except LazyWireCircularDependencyError as error:
        print(f"reason={error.reason.value}")  # => reason=multiple_initialization
        print(f"suspects={[key.display_name for key in error.suspects]}")  # => suspects=['right']


async def async_cycle() -> None:
    registry = Registry(max_initialization_duration_ms=50)

    async def make_left() -> tuple[str, object]:
        return ("left", await registry.aget("right"))

    async def make_right() -> tuple[str, object]:
        return ("right", await registry.aget("left"))

    registry.add("left", make_left)
    registry.add("right", make_right)

    try:
        await registry.aget("left")
    except LazyWireCircularDependencyError as error:
        print(f"reason={error.reason.value}")  # => reason=timeout
    await asyncio.sleep(0.01)


if __name__ == "__main__":
    sync_cycle()
    asyncio.run(async_cycle())
