"""Async initializers and shared pending computations.

This module demonstrates:

1. An ``async def`` initializer resolved with ``await registry.aget(...)``.
2. Concurrent requests for the same key sharing one computation.
3. The sync/async boundary: ``get()`` refuses entries that must be awaited.
"""

from __future__ import annotations

import asyncio

from lazywire import LazyWireAsyncInitializerInSyncContextError, Registry, depends_on


class Connection:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


@depends_on(Connection)
class Repository:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection


async def main() -> None:
    registry = Registry()
    connects = 0

    async def connect() -> Connection:
        nonlocal connects
        connects += 1
        await asyncio.sleep(0.01)
        return Connection("postgres://localhost/app")

    registry.add(Connection, connect)
    registry.add(Repository)

    try:
        registry.get(Repository)
    except LazyWireAsyncInitializerInSyncContextError as error:
        async_in_sync = type(error).__name__
    print(
        f"async_in_sync={async_in_sync}",
    )  # => async_in_sync=LazyWireAsyncInitializerInSyncContextError

    repositories = await asyncio.gather(*(registry.aget(Repository) for _ in range(3)))
    shared = all(repository is repositories[0] for repository in repositories)
    print(f"shared={shared}")  # => shared=True
    print(f"connects={connects}")  # => connects=1

    # Once resolved, the value is available synchronously too.
    print(f"dsn={registry.get(Repository).connection.dsn}")  # => dsn=postgres://localhost/app


if __name__ == "__main__":
    asyncio.run(main())
