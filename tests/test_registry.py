"""Tests for spillway._registry."""

from __future__ import annotations

import asyncio
import threading

import pytest

from spillway._context import SharedContext
from spillway._decorators import step
from spillway._registry import StepRegistry, default_registry


class Git:
    def __init__(self) -> None:
        self.calls: list[str] = []

    @step(name="git.checkout")
    def checkout(self, ctx: SharedContext) -> str:
        self.calls.append("checkout")
        return "abc123"

    @step(name="git.tag", parallel=True)
    async def tag(self, ctx: SharedContext) -> None:
        self.calls.append("tag")

    def helper(self, ctx: SharedContext) -> str:
        return "not a step"


class TestRegisterStep:
    def test_basic(self, registry: StepRegistry) -> None:
        git = Git()
        record = registry.register_step("checkout", git, "checkout")
        assert registry.get_step("checkout") is record
        assert record.owner is git
        assert record.metadata == {"name": "checkout", "parallel": False}

    def test_extra_metadata(self, registry: StepRegistry) -> None:
        record = registry.register_step("c", Git(), "checkout", team="infra")
        assert record.metadata["team"] == "infra"

    def test_plain_callable(self, registry: StepRegistry) -> None:
        registry.register_step("fn", None, lambda ctx: 5)
        record = registry.get_step("fn")
        assert record is not None
        assert asyncio.run(record.invoke(SharedContext())) == 5

    def test_unknown_method_raises(self, registry: StepRegistry) -> None:
        with pytest.raises(TypeError, match="no callable 'missing'"):
            registry.register_step("x", Git(), "missing")

    def test_later_registration_replaces(self, registry: StepRegistry) -> None:
        first, second = Git(), Git()
        registry.register_step("checkout", first, "checkout")
        registry.register_step("checkout", second, "checkout")
        record = registry.get_step("checkout")
        assert record is not None
        assert record.owner is second
        assert len(registry) == 1


class TestRegisterInstance:
    def test_registers_declared_steps(self, registry: StepRegistry) -> None:
        git = Git()
        names = registry.register_instance(git)
        assert names == ["git.checkout", "git.tag"]
        assert registry.list_steps() == ["git.checkout", "git.tag"]
        assert "helper" not in registry

    def test_metadata_carries_declaration(self, registry: StepRegistry) -> None:
        registry.register_instance(Git())
        record = registry.get_step("git.tag")
        assert record is not None
        assert record.metadata["parallel"] is True
        assert record.metadata["method"] == "tag"

    def test_invoke_sync_and_async(self, registry: StepRegistry) -> None:
        git = Git()
        registry.register_instance(git)
        ctx = SharedContext()

        checkout = registry.get_step("git.checkout")
        tag = registry.get_step("git.tag")
        assert checkout is not None and tag is not None

        assert asyncio.run(checkout.invoke(ctx)) == "abc123"
        assert asyncio.run(tag.invoke(ctx)) is None
        assert git.calls == ["checkout", "tag"]


class TestLookup:
    def test_missing_returns_none(self, registry: StepRegistry) -> None:
        assert registry.get_step("nope") is None

    def test_find_steps_substring(self, registry: StepRegistry) -> None:
        for name in ("test.unit", "test.e2e", "build.compile"):
            registry.register_step(name, None, lambda ctx: None)
        assert registry.find_steps("test.") == ["test.unit", "test.e2e"]
        assert registry.find_steps("compile") == ["build.compile"]
        assert registry.find_steps("deploy") == []


class TestClear:
    def test_clear(self, registry: StepRegistry) -> None:
        registry.register_instance(Git())
        registry.clear()
        assert registry.list_steps() == []

    def test_default_registry_is_shared(self) -> None:
        default_registry.register_step("x", None, lambda ctx: None)
        assert "x" in default_registry


class TestThreadSafety:
    def test_concurrent_registration(self, registry: StepRegistry) -> None:
        errors: list[Exception] = []

        def register_steps(prefix: str) -> None:
            try:
                for i in range(50):
                    registry.register_step(f"{prefix}_{i}", None, lambda ctx: None)
            except Exception as exc:
                errors.append(exc)

        threads = [
            threading.Thread(target=register_steps, args=(f"t{t}",)) for t in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(registry) == 200
