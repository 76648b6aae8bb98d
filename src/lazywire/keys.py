from __future__ import annotations

import types
from typing import Any, TypeAlias, TypeGuard

from lazywire.exceptions import LazyWireInvalidArgumentsError


class Token:
    """Symbol-like opaque identity.

    Two tokens are different keys even when they share a name. The name is
    used for diagnostics only.
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Token({self.name!r})"


class TypeKey:
    """Key derived from a class; equal only to keys of the very same class."""

    __slots__ = ("handle",)

    def __init__(self, handle: type[Any]) -> None:
        self.handle = handle

    @property
    def display_name(self) -> str:
        return self.handle.__name__

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TypeKey) and other.handle is self.handle

    def __hash__(self) -> int:
        return hash((TypeKey, id(self.handle)))

    def __repr__(self) -> str:
        return f"TypeKey({self.display_name})"


class OpaqueKey:
    """Key wrapping a string or a ``Token``.

    Strings compare by value, tokens by identity.
    """

    __slots__ = ("token",)

    def __init__(self, token: str | Token) -> None:
        self.token = token

    @property
    def display_name(self) -> str:
        if isinstance(self.token, Token):
            return self.token.name
        return self.token

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OpaqueKey):
            return False
        if isinstance(self.token, Token):
            return other.token is self.token
        return isinstance(other.token, str) and other.token == self.token

    def __hash__(self) -> int:
        if isinstance(self.token, Token):
            return hash((OpaqueKey, id(self.token)))
        return hash((OpaqueKey, self.token))

    def __repr__(self) -> str:
        return f"OpaqueKey({self.token!r})"


Key: TypeAlias = TypeKey | OpaqueKey
KeyLike: TypeAlias = type[Any] | str | Token | TypeKey | OpaqueKey


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def key_from(value: KeyLike) -> Key:
    """Normalize a class, string, token or ready key into a registry key."""
    if isinstance(value, TypeKey | OpaqueKey):
        return value
    if isinstance(value, str | Token):
        return OpaqueKey(value)
    if is_runtime_class(value):
        return TypeKey(value)
    msg = f"Registry keys must be classes, strings or Token objects, got {value!r}"
    raise LazyWireInvalidArgumentsError(msg)


__all__ = ["Key", "KeyLike", "OpaqueKey", "Token", "TypeKey", "is_runtime_class", "key_from"]
