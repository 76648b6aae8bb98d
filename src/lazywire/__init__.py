from lazywire.dependencies import DependencyDeclarations, declarations, depends_on
from lazywire.exceptions import (
    CircularDependencyReason,
    LazyWireArityMismatchError,
    LazyWireAsyncInitializerInSyncContextError,
    LazyWireCircularDependencyError,
    LazyWireDuplicateKeyError,
    LazyWireError,
    LazyWireInvalidArgumentsError,
    LazyWireNotFoundError,
    LazyWireWrongTypeError,
)
from lazywire.keys import Key, OpaqueKey, Token, TypeKey
from lazywire.registry import Registry
from lazywire.settings import RegistrySettings

__all__ = [
    "CircularDependencyReason",
    "DependencyDeclarations",
    "Key",
    "LazyWireArityMismatchError",
    "LazyWireAsyncInitializerInSyncContextError",
    "LazyWireCircularDependencyError",
    "LazyWireDuplicateKeyError",
    "LazyWireError",
    "LazyWireInvalidArgumentsError",
    "LazyWireNotFoundError",
    "LazyWireWrongTypeError",
    "OpaqueKey",
    "Registry",
    "RegistrySettings",
    "Token",
    "TypeKey",
    "declarations",
    "depends_on",
]
