from __future__ import annotations

import pytest

from lazywire.dependencies import DependencyDeclarations, declarations, depends_on
from lazywire.exceptions import LazyWireInvalidArgumentsError
from lazywire.keys import OpaqueKey, Token, TypeKey


class _Database:
    pass


def test_lookup_returns_none_without_declaration(store: DependencyDeclarations) -> None:
    assert store.lookup(_Database) is None


def test_declare_keeps_order_and_normalizes_keys(store: DependencyDeclarations) -> None:
    token = Token("cache")

    class Service:
        pass

    store.declare(Service, _Database, "settings", token)

    assert store.lookup(Service) == (TypeKey(_Database), OpaqueKey("settings"), OpaqueKey(token))


def test_empty_declaration_differs_from_missing_one(store: DependencyDeclarations) -> None:
    class Clock:
        pass

    store.declare(Clock)

    assert store.lookup(Clock) == ()


def test_redeclaring_replaces_previous_keys(store: DependencyDeclarations) -> None:
    class Service:
        pass

    store.declare(Service, "first")
    store.declare(Service, "second")

    assert store.lookup(Service) == (OpaqueKey("second"),)


def test_declarations_are_not_inherited(store: DependencyDeclarations) -> None:
    class Base:
        pass

    class Child(Base):
        pass

    store.declare(Base, _Database)

    assert store.lookup(Child) is None


def test_forget_removes_declaration(store: DependencyDeclarations) -> None:
    class Service:
        pass

    store.declare(Service, _Database)
    store.forget(Service)

    assert store.lookup(Service) is None


def test_declare_rejects_non_classes(store: DependencyDeclarations) -> None:
    with pytest.raises(LazyWireInvalidArgumentsError, match="only be declared on classes"):
        store.declare("service", _Database)  # type: ignore[arg-type]


def test_depends_on_returns_class_and_uses_default_store() -> None:
    @depends_on(_Database)
    class Service:
        def __init__(self, database: _Database) -> None:
            self.database = database

    assert isinstance(Service, type)
    assert declarations.lookup(Service) == (TypeKey(_Database),)


def test_depends_on_accepts_custom_store(store: DependencyDeclarations) -> None:
    @depends_on("settings", store=store)
    class Service:
        pass

    assert store.lookup(Service) == (OpaqueKey("settings"),)
    assert declarations.lookup(Service) is None
