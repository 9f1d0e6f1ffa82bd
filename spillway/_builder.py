"""Flow builder: compose registered steps into sequential and parallel groups."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from functools import partial

from spillway._context import SharedContext, _active_flow
from spillway._errors import MissingDependencyError, UnregisteredStep
from spillway._executor import run_step
from spillway._graph import DependencyGraph
from spillway._registry import StepRegistry, default_registry
from spillway._strategies import ParallelStrategy, SequentialStrategy, Task
from spillway._types import Condition, FlowEntry, FlowGroup

logger = logging.getLogger("spillway")

RESULT_PREFIX = "result."


class FlowBuilder:
    """Builds a flow from named steps and executes it.

    Entries are appended in call order and never removed.  At execution time
    consecutive entries sharing the same parallel flag form a group; groups
    run one after another in append order.  An entry's ``dependencies`` are
    context keys checked just before it runs, not scheduling hints.

    Nested :meth:`parallel` / :meth:`sequential` sub-flows are flattened to
    one level: every entry of the sub-flow takes the enclosing call's
    discipline, so an inner ordering inside a parallel sub-flow is lost.
    """

    def __init__(
        self,
        name: str = "flow",
        *,
        registry: StepRegistry | None = None,
        context: SharedContext | None = None,
    ) -> None:
        self.name = name
        self._registry = registry if registry is not None else default_registry
        self._context = context if context is not None else SharedContext()
        self._entries: list[FlowEntry] = []

    # -- composition ----------------------------------------------------------

    def add_step(
        self, name: str, dependencies: Sequence[str] | None = None
    ) -> FlowBuilder:
        return self._append(FlowEntry(name, False, _deps(dependencies)))

    def add_parallel_step(
        self, name: str, dependencies: Sequence[str] | None = None
    ) -> FlowBuilder:
        return self._append(FlowEntry(name, True, _deps(dependencies)))

    def add_parallel_steps(
        self, names: Iterable[str], dependencies: Sequence[str] | None = None
    ) -> FlowBuilder:
        """Append each name as its own parallel entry sharing *dependencies*."""
        for step_name in names:
            self.add_parallel_step(step_name, dependencies)
        return self

    def add_conditional_step(
        self,
        name: str,
        condition: Condition,
        dependencies: Sequence[str] | None = None,
    ) -> FlowBuilder:
        """Append a sequential entry that runs only if *condition* holds.

        *condition* receives the shared context when the entry's turn comes.
        """
        return self._append(
            FlowEntry(name, False, _deps(dependencies), condition=condition)
        )

    def add_steps_from_class(
        self, group_key: str, names: Iterable[str] | None = None
    ) -> FlowBuilder:
        """Append registered steps whose names contain *group_key*.

        When *names* is given, only those that also match *group_key* are
        added, in the order given.
        """
        available = self._registry.find_steps(group_key)
        for step_name in available if names is None else names:
            if step_name in available:
                self.add_step(step_name)
        return self

    def add_graph(self, graph: DependencyGraph, parallel: bool = False) -> FlowBuilder:
        """Append the graph's resolved order, skipping phantom nodes."""
        for step_name in graph.resolve_order():
            if not graph.is_phantom(step_name):
                self._append(FlowEntry(step_name, parallel))
        return self

    def parallel(self, build: Callable[[FlowBuilder], object]) -> FlowBuilder:
        """Build a sub-flow with *build* and append its entries as parallel."""
        return self._import_subflow(build, parallel=True)

    def sequential(self, build: Callable[[FlowBuilder], object]) -> FlowBuilder:
        """Build a sub-flow with *build* and append its entries as sequential."""
        return self._import_subflow(build, parallel=False)

    # -- inspection -----------------------------------------------------------

    def get_context(self) -> SharedContext:
        return self._context

    def get_steps(self) -> list[str]:
        return [entry.name for entry in self._entries]

    @property
    def entries(self) -> tuple[FlowEntry, ...]:
        return tuple(self._entries)

    def groups(self) -> list[FlowGroup]:
        """Partition the entries into maximal runs of equal parallel flag."""
        return [
            FlowGroup(parallel=flag, entries=tuple(run))
            for flag, run in itertools.groupby(
                self._entries, key=lambda entry: entry.parallel
            )
        ]

    def missing_steps(self) -> list[str]:
        """Entry names that are not in the registry, in entry order."""
        return [
            entry.name for entry in self._entries if entry.name not in self._registry
        ]

    def validate(self) -> bool:
        """Check every entry resolves in the registry.

        Logs the missing names and returns ``False`` instead of raising.
        """
        missing = self.missing_steps()
        if missing:
            logger.error(
                "flow.invalid", extra={"flow": self.name, "missing_steps": missing}
            )
            return False
        return True

    # -- execution ------------------------------------------------------------

    async def execute(self) -> None:
        """Run every group in append order.

        Any error aborts the flow.  Context writes made before the failure
        are kept.
        """
        groups = self.groups()
        logger.info(
            "flow.start",
            extra={
                "flow": self.name,
                "steps": len(self._entries),
                "groups": len(groups),
            },
        )
        with _active_flow(self.name, self._context):
            for group in groups:
                tasks = [
                    Task(entry.name, partial(self._run_entry, entry))
                    for entry in group.entries
                ]
                logger.info(
                    "group.start",
                    extra={
                        "flow": self.name,
                        "parallel": group.parallel,
                        "group_steps": list(group.names),
                    },
                )
                if group.parallel:
                    await ParallelStrategy().execute(tasks)
                else:
                    await SequentialStrategy().execute(tasks)
        logger.info("flow.end", extra={"flow": self.name})

    async def _run_entry(self, entry: FlowEntry) -> None:
        context = self._context
        if entry.condition is not None and not entry.condition(context):
            logger.info("step.skipped", extra={"flow": self.name, "step": entry.name})
            return

        if entry.dependencies:
            missing = [dep for dep in entry.dependencies if not context.has(dep)]
            if missing:
                raise MissingDependencyError(entry.name, missing)

        record = self._registry.get_step(entry.name)
        if record is None:
            raise UnregisteredStep(entry.name)

        result = await run_step(record, context, self.name)
        if result is not None:
            context.set(RESULT_PREFIX + entry.name, result)

    # -- internals ------------------------------------------------------------

    def _append(self, entry: FlowEntry) -> FlowBuilder:
        self._entries.append(entry)
        return self

    def _import_subflow(
        self, build: Callable[[FlowBuilder], object], *, parallel: bool
    ) -> FlowBuilder:
        child = FlowBuilder(self.name, registry=self._registry, context=self._context)
        build(child)
        for entry in child._entries:
            self._append(replace(entry, parallel=parallel))
        return self


def _deps(dependencies: Sequence[str] | None) -> tuple[str, ...] | None:
    return tuple(dependencies) if dependencies is not None else None
