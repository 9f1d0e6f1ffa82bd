"""Execution strategies: sequential, parallel and mixed task runs."""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("spillway")


@dataclass(frozen=True, slots=True)
class Task:
    """A named unit of work.

    *work* takes no arguments and returns an awaitable, or a plain value for
    synchronous work.
    """

    name: str
    work: Callable[[], Any]

    async def run(self) -> Any:
        result = self.work()
        if inspect.isawaitable(result):
            result = await result
        return result


class ExecutionStrategy(ABC):
    """Ordering and failure policy applied to a list of tasks."""

    @abstractmethod
    async def execute(self, tasks: Sequence[Task]) -> list[Any]:
        """Run *tasks* and return their results in task order."""


class SequentialStrategy(ExecutionStrategy):
    """Run tasks one at a time; the first failure aborts the rest."""

    async def execute(self, tasks: Sequence[Task]) -> list[Any]:
        results: list[Any] = []
        for task in tasks:
            results.append(await task.run())
        return results


class ParallelStrategy(ExecutionStrategy):
    """Run every task concurrently and wait for all of them to settle.

    A failing task never cancels its siblings.  Once everything has settled,
    the first failure (in completion order) is re-raised unchanged; any other
    failures are logged.
    """

    async def execute(self, tasks: Sequence[Task]) -> list[Any]:
        failures: list[tuple[Task, Exception]] = []

        async def settle(task: Task) -> Any:
            try:
                return await task.run()
            except Exception as exc:
                failures.append((task, exc))
                return None

        results = await asyncio.gather(*(settle(task) for task in tasks))
        if failures:
            for task, exc in failures[1:]:
                logger.warning(
                    "parallel.sibling_failed",
                    extra={"step": task.name, "error": repr(exc)},
                )
            raise failures[0][1]
        return list(results)


class MixedStrategy:
    """Run a fixed sequential list, then (only on success) a parallel list.

    The parallel phase never starts before the sequential phase has fully
    settled.
    """

    def __init__(self, sequential: Sequence[Task], parallel: Sequence[Task]) -> None:
        self.sequential = list(sequential)
        self.parallel = list(parallel)

    async def execute(self) -> list[Any]:
        results = await SequentialStrategy().execute(self.sequential)
        results.extend(await ParallelStrategy().execute(self.parallel))
        return results


def get_strategy(name: str) -> ExecutionStrategy:
    """Return the strategy registered under *name*.

    ``"mixed"`` is not accepted here because it needs two task lists; build a
    :class:`MixedStrategy` directly instead.
    """
    if name == "sequential":
        return SequentialStrategy()
    if name == "parallel":
        return ParallelStrategy()
    raise ValueError(f"Unknown strategy: {name!r}")
