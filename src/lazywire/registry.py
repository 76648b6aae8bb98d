from __future__ import annotations

import asyncio
import logging
from typing import Any, TypeVar, overload

from pydantic_settings import BaseSettings

from lazywire.dependencies import DependencyDeclarations, declarations
from lazywire.entry import AsyncInitializer, Entry, Initializer
from lazywire.exceptions import (
    CircularDependencyReason,
    LazyWireAsyncInitializerInSyncContextError,
    LazyWireCircularDependencyError,
    LazyWireDuplicateKeyError,
    LazyWireInvalidArgumentsError,
    LazyWireNotFoundError,
    LazyWireWrongTypeError,
)
from lazywire.injection import InjectedInitializer, check_arity
from lazywire.keys import Key, KeyLike, Token, TypeKey, key_from
from lazywire.settings import RegistrySettings

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_MAX_INITIALIZATION_DURATION_MS = 10_000


class Registry:
    """Lazily build and memoize interdependent objects.

    Values are registered under keys (classes, strings or ``Token`` objects)
    together with a zero-argument initializer and built on first request.
    Construction order follows from the requests initializers make while
    running, so no bootstrap order has to be written by hand.

    ``get`` resolves without suspending and refuses entries that need awaiting;
    ``aget`` resolves anything and lets concurrent callers share a single
    pending computation. Dependency cycles are detected heuristically: nested
    re-entry into the same initializer fails fast, and pending computations
    that exceed ``max_initialization_duration_ms`` fail with a timeout.
    """

    def __init__(
        self,
        max_initialization_duration_ms: int = DEFAULT_MAX_INITIALIZATION_DURATION_MS,
        *,
        dependency_declarations: DependencyDeclarations | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            max_initialization_duration_ms: How long a pending computation may
                run before it is reported as a circular dependency.
            dependency_declarations: Store consulted when a class is added
                without an initializer. Defaults to the store filled by
                ``depends_on``.

        """
        if max_initialization_duration_ms <= 0:
            msg = (
                "max_initialization_duration_ms must be positive, "
                f"got {max_initialization_duration_ms!r}"
            )
            raise LazyWireInvalidArgumentsError(msg)
        self.max_initialization_duration_ms = max_initialization_duration_ms
        self._declarations = (
            dependency_declarations if dependency_declarations is not None else declarations
        )
        self._entries: dict[Key, Entry] = {}
        self._names: set[str] = set()

    @classmethod
    def from_settings(cls, settings: RegistrySettings | None = None) -> Registry:
        """Build a registry configured from ``RegistrySettings``.

        When ``settings`` is omitted they are read from ``LAZYWIRE_*``
        environment variables.
        """
        if settings is None:
            settings = RegistrySettings()
        return cls(max_initialization_duration_ms=settings.max_initialization_duration_ms)

    @property
    def max_wait(self) -> float:
        return self.max_initialization_duration_ms / 1000

    def add(self, key: KeyLike, initializer: Initializer | None = None) -> None:
        """Register ``initializer`` under ``key`` without running it.

        When ``initializer`` is omitted and ``key`` is a class, the class must
        either carry a dependency declaration (see ``depends_on``), in which
        case its constructor is called with the resolved dependencies, or be a
        ``pydantic_settings.BaseSettings`` subclass, which is built without
        arguments.

        Raises:
            LazyWireDuplicateKeyError: A key with the same display name exists.
            LazyWireInvalidArgumentsError: No initializer can be derived.
            LazyWireArityMismatchError: Declared dependencies do not fit the
                constructor.

        Examples:
            .. code-block:: python

                registry.add(Database, lambda: Database(url))
                registry.add("settings", load_settings)

                @depends_on(Database)
                class UserService: ...

                registry.add(UserService)

        """
        resolved_key = key_from(key)
        if resolved_key.display_name in self._names:
            raise LazyWireDuplicateKeyError(resolved_key)

        dependencies: tuple[Key, ...] | None = None
        async_initializer: AsyncInitializer | None = None
        if initializer is None:
            if not isinstance(resolved_key, TypeKey):
                msg = f"An initializer is required to register {resolved_key.display_name!r}"
                raise LazyWireInvalidArgumentsError(msg)
            dependencies = self._declarations.lookup(resolved_key.handle)
            if dependencies is not None:
                check_arity(resolved_key, dependencies)
                injected = InjectedInitializer(self, resolved_key, dependencies)
                initializer = injected
                async_initializer = injected.aconstruct
            elif issubclass(resolved_key.handle, BaseSettings):
                initializer = resolved_key.handle
            else:
                msg = (
                    f"{resolved_key.display_name!r} has no declared dependencies, "
                    "pass an initializer or decorate it with @depends_on(...)"
                )
                raise LazyWireInvalidArgumentsError(msg)
        elif not callable(initializer):
            msg = f"Initializer of {resolved_key.display_name!r} must be callable, got {initializer!r}"
            raise LazyWireInvalidArgumentsError(msg)

        self._entries[resolved_key] = Entry(
            resolved_key,
            initializer,
            dependencies=dependencies,
            async_initializer=async_initializer,
        )
        self._names.add(resolved_key.display_name)
        logger.debug("Registered %r", resolved_key.display_name)

    @overload
    def add_inplace(self, key: type[T], initializer: Initializer | None = None) -> T: ...

    @overload
    def add_inplace(self, key: str | Token | Key, initializer: Initializer | None = None) -> Any: ...

    def add_inplace(self, key: KeyLike, initializer: Initializer | None = None) -> Any:
        """Register ``key`` and build its value right away."""
        self.add(key, initializer)
        return self.get(key)

    @overload
    async def aadd_inplace(self, key: type[T], initializer: Initializer | None = None) -> T: ...

    @overload
    async def aadd_inplace(
        self,
        key: str | Token | Key,
        initializer: Initializer | None = None,
    ) -> Any: ...

    async def aadd_inplace(self, key: KeyLike, initializer: Initializer | None = None) -> Any:
        """Register ``key`` and build its value right away, awaiting if needed."""
        self.add(key, initializer)
        return await self.aget(key)

    @overload
    def get(self, key: type[T]) -> T: ...

    @overload
    def get(self, key: str | Token | Key) -> Any: ...

    def get(self, key: KeyLike) -> Any:
        """Return the value of ``key``, building it on first request.

        Raises:
            LazyWireNotFoundError: ``key`` is not registered.
            LazyWireAsyncInitializerInSyncContextError: The value can only be
                built by awaiting, use ``aget``.
            LazyWireCircularDependencyError: Initializers re-entered each other.
            LazyWireWrongTypeError: A class key resolved to a foreign instance.

        """
        entry = self._find(key)
        if not entry.is_resolved and self._entry_requires_await(entry, set()):
            raise LazyWireAsyncInitializerInSyncContextError(entry.key)
        value = entry.get(lambda reason: self._circular_dependency_error(entry, reason))
        return self._check_type(entry, value)

    @overload
    async def aget(self, key: type[T]) -> T: ...

    @overload
    async def aget(self, key: str | Token | Key) -> Any: ...

    async def aget(self, key: KeyLike) -> Any:
        """Return the value of ``key``, awaiting its initializer when needed.

        Concurrent calls for the same key share one computation. A computation
        that does not settle within ``max_initialization_duration_ms`` fails
        with ``LazyWireCircularDependencyError`` (reason ``TIMEOUT``).
        """
        entry = self._find(key)
        value = await entry.aget(
            self.max_wait,
            lambda reason: self._circular_dependency_error(entry, reason),
        )
        return self._check_type(entry, value)

    def get_all(self) -> list[Any]:
        """Resolve every entry in registration order."""
        return [self.get(entry_key) for entry_key in list(self._entries)]

    async def aget_all(self) -> list[Any]:
        """Resolve every entry, awaiting where needed.

        Entries are started in registration order and awaited together, so one
        entry may wait on a value another entry is still producing. Results
        follow registration order.
        """
        values = await asyncio.gather(*(self.aget(entry_key) for entry_key in list(self._entries)))
        return list(values)

    def get_keys(self) -> list[Key]:
        """Return the registered keys in registration order."""
        return list(self._entries)

    def requires_await(self, key: KeyLike) -> bool:
        """Return whether resolving ``key`` right now would have to await.

        Unknown keys report ``False`` so that resolving them raises
        ``LazyWireNotFoundError`` from the synchronous path.
        """
        entry = self._entries.get(key_from(key))
        if entry is None:
            return False
        return self._entry_requires_await(entry, set())

    def _entry_requires_await(self, entry: Entry, seen: set[Key]) -> bool:
        if entry.is_resolved:
            return False
        if entry.is_pending or entry.is_async_initializer:
            return True
        if entry.dependencies is None or entry.key in seen:
            return False
        seen.add(entry.key)
        for dependency in entry.dependencies:
            dependency_entry = self._entries.get(dependency)
            if dependency_entry is not None and self._entry_requires_await(dependency_entry, seen):
                return True
        return False

    def _find(self, key: KeyLike) -> Entry:
        resolved_key = key_from(key)
        entry = self._entries.get(resolved_key)
        if entry is None:
            raise LazyWireNotFoundError(resolved_key)
        return entry

    def _check_type(self, entry: Entry, value: Any) -> Any:
        if not isinstance(entry.key, TypeKey):
            return value
        expected = entry.key.handle
        if _is_instance(value, expected):
            return value
        raise LazyWireWrongTypeError(
            entry.key,
            expected=expected.__name__,
            actual=type(value).__name__,
        )

    def _circular_dependency_error(
        self,
        entry: Entry,
        reason: CircularDependencyReason,
    ) -> LazyWireCircularDependencyError:
        suspects = tuple(
            other.key
            for other in self._entries.values()
            if other is not entry and other.is_suspicious(self.max_wait)
        )
        error = LazyWireCircularDependencyError(entry.key, reason, suspects)
        logger.warning("%s", error)
        return error

    def __repr__(self) -> str:
        names = ", ".join(entry.name for entry in self._entries.values())
        return f"Registry([{names}], max_initialization_duration_ms={self.max_initialization_duration_ms})"


def _is_instance(value: Any, expected: type[Any]) -> bool:
    # Protocols that are not runtime checkable cannot be verified.
    if getattr(expected, "_is_protocol", False) and not getattr(
        expected,
        "_is_runtime_protocol",
        False,
    ):
        return True
    return isinstance(value, expected)


__all__ = ["DEFAULT_MAX_INITIALIZATION_DURATION_MS", "Registry"]
