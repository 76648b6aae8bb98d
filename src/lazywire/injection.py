from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from lazywire.exceptions import LazyWireArityMismatchError, LazyWireInvalidArgumentsError
from lazywire.keys import Key, TypeKey

if TYPE_CHECKING:
    from lazywire.registry import Registry

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def check_arity(key: TypeKey, dependencies: tuple[Key, ...]) -> None:
    """Validate that ``dependencies`` can be passed positionally to the class constructor.

    The declared count must cover every positional parameter without a default
    and must not exceed the number of positional parameters, unless the
    constructor takes ``*args``.

    Raises:
        LazyWireArityMismatchError: The declaration does not fit the constructor.
        LazyWireInvalidArgumentsError: The constructor signature cannot be inspected.

    """
    try:
        signature = inspect.signature(key.handle)
    except (TypeError, ValueError) as error:
        msg = f"Cannot inspect constructor of {key.display_name!r}: {error}"
        raise LazyWireInvalidArgumentsError(msg) from error

    required = 0
    total = 0
    variadic = False
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        elif parameter.kind in _POSITIONAL_KINDS:
            total += 1
            if parameter.default is inspect.Parameter.empty:
                required += 1
        elif (
            parameter.kind is inspect.Parameter.KEYWORD_ONLY
            and parameter.default is inspect.Parameter.empty
        ):
            msg = (
                f"Constructor of {key.display_name!r} has required keyword-only parameter "
                f"{parameter.name!r} that positional injection cannot fill"
            )
            raise LazyWireInvalidArgumentsError(msg)

    declared = len(dependencies)
    if declared < required or (not variadic and declared > total):
        if variadic:
            expected = f"at least {required}"
        elif required == total:
            expected = str(total)
        else:
            expected = f"{required} to {total}"
        raise LazyWireArityMismatchError(key, declared, expected)


class InjectedInitializer:
    """Construct a class from values its declared dependency keys resolve to.

    Calling the initializer resolves dependencies synchronously when none of
    them has to be awaited. Otherwise it returns a coroutine that resolves all
    of them concurrently before constructing. ``aconstruct`` always takes the
    asynchronous route, so dependencies whose initializers return awaitables
    are handled as well.
    """

    def __init__(self, registry: Registry, key: TypeKey, dependencies: tuple[Key, ...]) -> None:
        self._registry = registry
        self._key = key
        self.dependencies = dependencies

    def __call__(self) -> Any:
        if any(self._registry.requires_await(dependency) for dependency in self.dependencies):
            return self.aconstruct()
        arguments = [self._registry.get(dependency) for dependency in self.dependencies]
        return self._key.handle(*arguments)

    async def aconstruct(self) -> Any:
        """Resolve every dependency with ``Registry.aget`` and construct the class."""
        arguments = await asyncio.gather(
            *(self._registry.aget(dependency) for dependency in self.dependencies),
        )
        return self._key.handle(*arguments)

    def __repr__(self) -> str:
        names = ", ".join(dependency.display_name for dependency in self.dependencies)
        return f"InjectedInitializer({self._key.display_name}({names}))"


__all__ = ["InjectedInitializer", "check_arity"]
