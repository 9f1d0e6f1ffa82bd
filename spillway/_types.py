"""Core type definitions for spillway steps and flows."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

if TYPE_CHECKING:
    from spillway._context import SharedContext

P = ParamSpec("P")
R = TypeVar("R")

Condition = Callable[["SharedContext"], bool]
Listener = Callable[[Any, Any], None]


@dataclass(frozen=True, slots=True)
class StepRecord:
    """A registry entry: the owning object and the method that does the work.

    *method* is either the attribute name looked up on *owner* at call time,
    or a callable invoked directly (in which case *owner* may be ``None``).
    """

    name: str
    owner: Any
    method: str | Callable[..., Any]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def handler(self) -> Callable[..., Any]:
        if callable(self.method):
            return self.method
        return getattr(self.owner, self.method)  # type: ignore[no-any-return]

    async def invoke(self, context: SharedContext) -> Any:
        """Call the handler with *context*, awaiting the result if needed."""
        result = self.handler(context)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(frozen=True, slots=True)
class FlowEntry:
    """One unit appended to a :class:`~spillway.FlowBuilder`."""

    name: str
    parallel: bool = False
    dependencies: tuple[str, ...] | None = None
    condition: Condition | None = None


@dataclass(frozen=True, slots=True)
class FlowGroup:
    """A maximal run of consecutive entries sharing the same parallel flag."""

    parallel: bool
    entries: tuple[FlowEntry, ...]

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(entry.name for entry in self.entries)
