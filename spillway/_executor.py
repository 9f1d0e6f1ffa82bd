"""Run registered steps by name under a named execution strategy."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from functools import partial
from typing import Any, Literal

from spillway._config import get_backend
from spillway._context import SharedContext, _active_flow, _active_step
from spillway._errors import UnregisteredStep
from spillway._registry import StepRegistry, default_registry
from spillway._strategies import MixedStrategy, Task, get_strategy
from spillway._types import StepRecord

logger = logging.getLogger("spillway")

StrategyName = Literal["sequential", "parallel", "mixed"]


async def run_step(record: StepRecord, context: SharedContext, flow_name: str) -> Any:
    """Invoke *record* with *context* inside a tracing span.

    Exceptions from the step are logged and re-raised unchanged.
    """
    backend = get_backend()
    with _active_step(record.name), backend.span(record.name, flow_name):
        try:
            return await record.invoke(context)
        except Exception:
            logger.error(
                "step.failed",
                exc_info=True,
                extra={"flow": flow_name, "step": record.name},
            )
            raise


class Executor:
    """Runs registry steps by name with a fixed strategy.

    Every step receives the executor's :class:`SharedContext`.  Results are
    returned, not stored in the context.
    """

    def __init__(
        self,
        strategy: StrategyName = "sequential",
        *,
        registry: StepRegistry | None = None,
        context: SharedContext | None = None,
        name: str = "executor",
    ) -> None:
        if strategy not in ("sequential", "parallel", "mixed"):
            raise ValueError(f"Unknown strategy: {strategy!r}")
        self.strategy = strategy
        self.name = name
        self._registry = registry if registry is not None else default_registry
        self._context = context if context is not None else SharedContext()

    def get_context(self) -> SharedContext:
        return self._context

    async def execute(
        self,
        names: Sequence[str],
        parallel_names: Sequence[str] = (),
    ) -> list[Any]:
        """Run *names* with the configured strategy.

        Under ``"mixed"``, *names* run sequentially and *parallel_names* run
        concurrently afterwards.  Every name is resolved before anything runs;
        unknown names raise :class:`UnregisteredStep`.
        """
        if parallel_names and self.strategy != "mixed":
            raise ValueError("parallel_names is only valid with the 'mixed' strategy")

        missing: list[str] = []
        tasks = self._tasks(names, missing)
        parallel_tasks = self._tasks(parallel_names, missing)
        if missing:
            raise UnregisteredStep(missing)

        with _active_flow(self.name, self._context):
            if self.strategy == "mixed":
                return await MixedStrategy(tasks, parallel_tasks).execute()
            return await get_strategy(self.strategy).execute(tasks)

    def _tasks(self, names: Iterable[str], missing: list[str]) -> list[Task]:
        """Build a task per name, appending unknown names to *missing*."""
        tasks: list[Task] = []
        for step_name in names:
            record = self._registry.get_step(step_name)
            if record is None:
                missing.append(step_name)
                continue
            tasks.append(
                Task(step_name, partial(run_step, record, self._context, self.name))
            )
        return tasks
