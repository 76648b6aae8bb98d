from __future__ import annotations

import pytest

from lazywire.exceptions import LazyWireInvalidArgumentsError
from lazywire.keys import OpaqueKey, Token, TypeKey, key_from


class _Service:
    pass


def _make_namesake() -> type:
    class _Service:
        pass

    return _Service


def test_type_keys_compare_by_class_identity() -> None:
    namesake = _make_namesake()

    assert TypeKey(_Service) == TypeKey(_Service)
    assert hash(TypeKey(_Service)) == hash(TypeKey(_Service))
    assert TypeKey(_Service) != TypeKey(namesake)
    assert TypeKey(namesake).display_name == TypeKey(_Service).display_name == "_Service"


def test_string_keys_compare_by_value() -> None:
    assert OpaqueKey("db") == OpaqueKey("".join(["d", "b"]))
    assert OpaqueKey("db").display_name == "db"


def test_tokens_compare_by_identity() -> None:
    first = Token("db")
    second = Token("db")

    assert OpaqueKey(first) == OpaqueKey(first)
    assert OpaqueKey(first) != OpaqueKey(second)
    assert OpaqueKey(first) != OpaqueKey("db")
    assert OpaqueKey(first).display_name == "db"


def test_type_and_opaque_keys_never_match() -> None:
    assert TypeKey(_Service) != OpaqueKey("_Service")


def test_key_from_normalizes_supported_values() -> None:
    token = Token("cache")
    ready = TypeKey(_Service)

    assert key_from(_Service) == TypeKey(_Service)
    assert key_from("db") == OpaqueKey("db")
    assert key_from(token) == OpaqueKey(token)
    assert key_from(ready) is ready


@pytest.mark.parametrize("value", [42, None, list[int], object()])
def test_key_from_rejects_other_values(value: object) -> None:
    with pytest.raises(LazyWireInvalidArgumentsError, match="must be classes"):
        key_from(value)  # type: ignore[arg-type]
