"""Tests for spillway._executor."""

from __future__ import annotations

import asyncio
import logging

import pytest

from spillway._context import SharedContext
from spillway._decorators import step
from spillway._errors import UnregisteredStep
from spillway._executor import Executor
from spillway._registry import StepRegistry
from spillway._types import StepRecord


class Pipeline:
    def __init__(self) -> None:
        self.order: list[str] = []

    @step(name="seq1")
    async def seq1(self, ctx: SharedContext) -> str:
        await asyncio.sleep(0.02)
        self.order.append("seq1")
        return "seq1"

    @step(name="par1")
    async def par1(self, ctx: SharedContext) -> str:
        await asyncio.sleep(0.01)
        self.order.append("par1")
        return "par1"

    @step(name="par2")
    def par2(self, ctx: SharedContext) -> str:
        self.order.append("par2")
        return "par2"


@pytest.fixture
def pipeline(registry: StepRegistry) -> Pipeline:
    owner = Pipeline()
    registry.register_instance(owner)
    return owner


class TestExecutor:
    def test_sequential(self, registry: StepRegistry, pipeline: Pipeline) -> None:
        executor = Executor("sequential", registry=registry)
        results = asyncio.run(executor.execute(["seq1", "par1", "par2"]))
        assert results == ["seq1", "par1", "par2"]
        assert pipeline.order == ["seq1", "par1", "par2"]

    def test_parallel(self, registry: StepRegistry, pipeline: Pipeline) -> None:
        executor = Executor("parallel", registry=registry)
        results = asyncio.run(executor.execute(["seq1", "par1", "par2"]))
        assert results == ["seq1", "par1", "par2"]
        assert pipeline.order == ["par2", "par1", "seq1"]

    def test_mixed(self, registry: StepRegistry, pipeline: Pipeline) -> None:
        executor = Executor("mixed", registry=registry)
        asyncio.run(executor.execute(["seq1"], parallel_names=["par1", "par2"]))
        assert pipeline.order[0] == "seq1"
        assert sorted(pipeline.order[1:]) == ["par1", "par2"]

    def test_results_not_stored_in_context(
        self, registry: StepRegistry, pipeline: Pipeline
    ) -> None:
        executor = Executor(registry=registry)
        asyncio.run(executor.execute(["par2"]))
        assert len(executor.get_context()) == 0

    def test_unknown_names_raise_before_running(
        self, registry: StepRegistry, pipeline: Pipeline
    ) -> None:
        executor = Executor("mixed", registry=registry)
        with pytest.raises(UnregisteredStep) as info:
            asyncio.run(executor.execute(["seq1", "ghost"], parallel_names=["spook"]))
        assert info.value.names == ("ghost", "spook")
        assert pipeline.order == []

    def test_parallel_names_rejected_outside_mixed(
        self, registry: StepRegistry
    ) -> None:
        executor = Executor("sequential", registry=registry)
        with pytest.raises(ValueError, match="only valid with the 'mixed'"):
            asyncio.run(executor.execute([], parallel_names=["x"]))

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError, match="Unknown strategy"):
            Executor("random")  # type: ignore[arg-type]

    def test_spans_wrap_each_step(
        self,
        registry: StepRegistry,
        pipeline: Pipeline,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        executor = Executor(registry=registry, name="nightly")
        with caplog.at_level(logging.INFO, logger="spillway"):
            asyncio.run(executor.execute(["par2"]))

        start, end = [r for r in caplog.records if r.message.startswith("step.")]
        assert start.message == "step.start"
        assert start.flow == "nightly"  # type: ignore[attr-defined]
        cid = executor.get_context().correlation_id
        assert start.correlation_id == cid  # type: ignore[attr-defined]
        assert end.status == "ok"  # type: ignore[attr-defined]

    def test_each_name_looked_up_once(self, pipeline: Pipeline) -> None:
        class CountingRegistry(StepRegistry):
            def __init__(self) -> None:
                super().__init__()
                self.lookups: list[str] = []

            def get_step(self, name: str) -> StepRecord | None:
                self.lookups.append(name)
                return super().get_step(name)

        registry = CountingRegistry()
        registry.register_instance(pipeline)
        executor = Executor("mixed", registry=registry)
        with pytest.raises(UnregisteredStep):
            asyncio.run(executor.execute(["seq1", "ghost"], parallel_names=["par1"]))
        assert registry.lookups == ["seq1", "ghost", "par1"]
