"""Tests for circular dependency detection."""

from __future__ import annotations

import asyncio
import time

import pytest

from lazywire import (
    CircularDependencyReason,
    LazyWireCircularDependencyError,
    OpaqueKey,
    Registry,
    TypeKey,
    depends_on,
)


class LeftSide:
    def __init__(self, right_side: RightSide) -> None:
        self.right_side = right_side


class RightSide:
    def __init__(self, left_side: LeftSide) -> None:
        self.left_side = left_side


class TestRepeatedCalls:
    def test_mutual_recursion_is_detected(self, registry: Registry) -> None:
        calls = {"left": 0, "right": 0}

        def make_left() -> LeftSide:
            calls["left"] += 1
            return LeftSide(registry.get(RightSide))

        def make_right() -> RightSide:
            calls["right"] += 1
            return RightSide(registry.get(LeftSide))

        registry.add(LeftSide, make_left)
        registry.add(RightSide, make_right)

        with pytest.raises(LazyWireCircularDependencyError, match="detected") as exc_info:
            registry.get(LeftSide)

        error = exc_info.value
        assert error.reason is CircularDependencyReason.MULTIPLE_INITIALIZATION
        assert error.key == TypeKey(LeftSide)
        assert error.suspects == (TypeKey(RightSide),)
        assert "RightSide" in str(error)
        assert calls == {"left": 2, "right": 2}

    def test_self_recursion_is_detected(self, registry: Registry) -> None:
        registry.add("loop", lambda: registry.get("loop"))

        with pytest.raises(LazyWireCircularDependencyError) as exc_info:
            registry.get("loop")

        assert exc_info.value.key == OpaqueKey("loop")
        assert exc_info.value.suspects == ()

    def test_entries_can_be_retried_after_cycle_is_broken(self, registry: Registry) -> None:
        break_cycle = False

        def make_right() -> str:
            if break_cycle:
                return "right"
            return registry.get("left")

        registry.add("left", lambda: f"left+{registry.get('right')}")
        registry.add("right", make_right)

        with pytest.raises(LazyWireCircularDependencyError):
            registry.get("left")
        # Detection is repeatable, the failed attempt left no counts behind.
        with pytest.raises(LazyWireCircularDependencyError):
            registry.get("left")

        break_cycle = True

        assert registry.get("left") == "left+right"

    def test_unrelated_entries_are_not_suspects(self, registry: Registry) -> None:
        registry.add("config", lambda: {"debug": True})
        registry.add("a", lambda: registry.get("config") and registry.get("b"))
        registry.add("b", lambda: registry.get("a"))

        with pytest.raises(LazyWireCircularDependencyError) as exc_info:
            registry.get("a")

        assert exc_info.value.suspects == (OpaqueKey("b"),)

    def test_declared_dependency_cycle_is_detected(self, registry: Registry) -> None:
        @depends_on("right")
        class Left:
            def __init__(self, right: object) -> None:
                self.right = right

        @depends_on(Left)
        class Right:
            def __init__(self, left: Left) -> None:
                self.left = left

        registry.add(Left)
        registry.add("right", lambda: registry.get(Right))
        registry.add(Right)

        with pytest.raises(LazyWireCircularDependencyError) as exc_info:
            registry.get(Left)

        assert exc_info.value.reason is CircularDependencyReason.MULTIPLE_INITIALIZATION
        assert set(exc_info.value.suspects) == {OpaqueKey("right"), TypeKey(Right)}


class TestTimeout:
    async def test_async_mutual_wait_times_out(self, fast_registry: Registry) -> None:
        async def make_left() -> LeftSide:
            return LeftSide(await fast_registry.aget(RightSide))

        async def make_right() -> RightSide:
            return RightSide(await fast_registry.aget(LeftSide))

        fast_registry.add(LeftSide, make_left)
        fast_registry.add(RightSide, make_right)

        started = time.monotonic()
        with pytest.raises(LazyWireCircularDependencyError) as exc_info:
            await fast_registry.aget(LeftSide)
        elapsed = time.monotonic() - started

        assert exc_info.value.reason is CircularDependencyReason.TIMEOUT
        assert exc_info.value.key == TypeKey(LeftSide)
        assert exc_info.value.suspects == (TypeKey(RightSide),)
        assert 0.09 <= elapsed < 1.0

        # Let the abandoned computations settle.
        await asyncio.sleep(0.05)
        assert not fast_registry._entries[TypeKey(LeftSide)].is_pending
        assert not fast_registry._entries[TypeKey(RightSide)].is_pending

    async def test_declared_dependency_cycle_times_out_when_awaited(
        self,
        fast_registry: Registry,
    ) -> None:
        class Left:
            def __init__(self, right: object) -> None:
                self.right = right

        @depends_on(Left)
        class Right:
            def __init__(self, left: Left) -> None:
                self.left = left

        depends_on(Right)(Left)
        fast_registry.add(Left)
        fast_registry.add(Right)

        with pytest.raises(LazyWireCircularDependencyError) as exc_info:
            await fast_registry.aget(Left)

        assert exc_info.value.reason is CircularDependencyReason.TIMEOUT
        assert exc_info.value.key == TypeKey(Left)

        await asyncio.sleep(0.05)
        assert not fast_registry._entries[TypeKey(Right)].is_pending
