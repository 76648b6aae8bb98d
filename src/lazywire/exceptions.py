from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazywire.keys import Key


class LazyWireError(Exception):
    """Represent a base class for all LazyWire-specific failures.

    Catch this type when you want to handle any registry error path without
    matching each concrete exception class individually. Exceptions raised by
    user initializers are never wrapped and do not derive from this class.
    """


class LazyWireInvalidArgumentsError(LazyWireError):
    """Signal invalid registration arguments.

    Raised by ``Registry.add`` and ``Registry.add_inplace`` when no initializer
    is given for a key that cannot be injected automatically, when a key value
    is not a class, string or ``Token``, and by ``Registry`` construction when
    the timeout is not positive.
    """


class LazyWireDuplicateKeyError(LazyWireError):
    """Signal registration of a key whose display name is already taken.

    Display names must be unique inside one registry so that error messages
    stay unambiguous. Typical fix is registering the second value under a
    different ``Token`` or string.
    """

    def __init__(self, key: Key) -> None:
        self.key = key
        super().__init__(f"Key with name {key.display_name!r} is already registered")


class LazyWireNotFoundError(LazyWireError):
    """Signal resolution of a key that has no entry.

    The same key may still be registered later and resolved afterwards.
    """

    def __init__(self, key: Key) -> None:
        self.key = key
        super().__init__(f"Key with name {key.display_name!r} is not registered")


class LazyWireArityMismatchError(LazyWireError):
    """Signal a dependency declaration that does not fit the constructor.

    Raised at registration time, before anything is constructed.
    """

    def __init__(self, key: Key, declared: int, expected: str) -> None:
        self.key = key
        self.declared = declared
        self.expected = expected
        super().__init__(
            f"{key.display_name} declares {declared} dependencies but its constructor "
            f"accepts {expected} positional arguments",
        )


class LazyWireWrongTypeError(LazyWireError):
    """Signal that a type key resolved to an instance of another type."""

    def __init__(self, key: Key, expected: str, actual: str) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Initializer of {key.display_name!r} returned {actual} instead of {expected}",
        )


class LazyWireAsyncInitializerInSyncContextError(LazyWireError):
    """Signal sync resolution of an entry that has to be awaited.

    Raised by ``Registry.get`` when the entry's initializer is asynchronous,
    when its computation is already in flight, or when an injected type depends
    on such an entry. Typical fix is switching to ``await registry.aget(...)``.
    """

    def __init__(self, key: Key) -> None:
        self.key = key
        super().__init__(
            f"{key.display_name!r} is initialized asynchronously, use 'await registry.aget()'",
        )


class CircularDependencyReason(Enum):
    """Heuristic that flagged a circular dependency."""

    MULTIPLE_INITIALIZATION = "multiple_initialization"
    """The same entry re-entered its initializer too many times."""

    TIMEOUT = "timeout"
    """A pending computation did not settle within the registry timeout."""


class LazyWireCircularDependencyError(LazyWireError):
    """Signal a probable dependency cycle.

    Detection is heuristic: ``reason`` tells which heuristic tripped and
    ``suspects`` lists the other entries that looked involved at the moment of
    detection. The suspect list is a best-effort hint for humans.
    """

    def __init__(
        self,
        key: Key,
        reason: CircularDependencyReason,
        suspects: tuple[Key, ...] = (),
    ) -> None:
        self.key = key
        self.reason = reason
        self.suspects = suspects
        message = f"Circular dependency in {key.display_name!r} initializer detected ({reason.value})"
        if suspects:
            names = ", ".join(suspect.display_name for suspect in suspects)
            message = f"{message}, other suspected entries: {names}"
        super().__init__(message)
