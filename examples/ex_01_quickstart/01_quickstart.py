"""Quickstart: declare dependencies once, let the registry pick the order.

Classes decorated with ``depends_on`` are registered without initializers.
Resolving the top-level service builds its dependencies first and every value
is built exactly once.
"""

from __future__ import annotations

from lazywire import Registry, depends_on

built: list[str] = []


@depends_on()
class Database:
    def __init__(self) -> None:
        self.host = "localhost"
        built.append("Database")


@depends_on(Database)
class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database
        built.append("UserRepository")


@depends_on(UserRepository, "greeting")
class UserService:
    def __init__(self, repository: UserRepository, greeting: str) -> None:
        self.repository = repository
        self.greeting = greeting
        built.append("UserService")


def main() -> None:
    registry = Registry()
    registry.add(UserService)
    registry.add(UserRepository)
    registry.add(Database)
    registry.add("greeting", lambda: "hello")

    service = registry.get(UserService)
    print(f"db_host={service.repository.database.host}")  # => db_host=localhost
    print(f"order={'>'.join(built)}")  # => order=Database>UserRepository>UserService

    same = registry.get(UserService) is service
    print(f"memoized={same}")  # => memoized=True

    names = [key.display_name for key in registry.get_keys()]
    print(f"keys={names}")  # => keys=['UserService', 'UserRepository', 'Database', 'greeting']


if __name__ == "__main__":
    main()
