from __future__ import annotations

import weakref
from collections.abc import Callable
from typing import Any, TypeVar

from lazywire.exceptions import LazyWireInvalidArgumentsError
from lazywire.keys import Key, KeyLike, is_runtime_class, key_from

C = TypeVar("C", bound=type[Any])


class DependencyDeclarations:
    """Store ordered dependency keys declared for classes.

    Declarations belong to the exact class they were made on and are not
    inherited by subclasses. Classes are referenced weakly.
    """

    def __init__(self) -> None:
        self._declarations: weakref.WeakKeyDictionary[type[Any], tuple[Key, ...]] = (
            weakref.WeakKeyDictionary()
        )

    def declare(self, cls: type[Any], *keys: KeyLike) -> None:
        """Declare ``keys`` as the constructor dependencies of ``cls``, in order.

        Calling it again for the same class replaces the previous declaration.
        Declaring no keys marks the class as injectable without arguments.
        """
        if not is_runtime_class(cls):
            msg = f"Dependencies can only be declared on classes, got {cls!r}"
            raise LazyWireInvalidArgumentsError(msg)
        self._declarations[cls] = tuple(key_from(key) for key in keys)

    def lookup(self, cls: type[Any]) -> tuple[Key, ...] | None:
        """Return the declared keys of ``cls``, or ``None`` when it has no declaration."""
        return self._declarations.get(cls)

    def forget(self, cls: type[Any]) -> None:
        """Drop the declaration of ``cls`` if there is one."""
        self._declarations.pop(cls, None)


declarations = DependencyDeclarations()


def depends_on(
    *keys: KeyLike,
    store: DependencyDeclarations | None = None,
) -> Callable[[C], C]:
    """Declare constructor dependencies with a class decorator.

    Examples:
        .. code-block:: python

            @depends_on(Database, "settings")
            class UserService:
                def __init__(self, db: Database, settings: dict) -> None: ...

    """
    target_store = store if store is not None else declarations

    def decorator(cls: C) -> C:
        target_store.declare(cls, *keys)
        return cls

    return decorator


__all__ = ["DependencyDeclarations", "declarations", "depends_on"]
