"""Exception hierarchy for spillway.

Every error raised by the library itself derives from :class:`SpillwayError`,
so callers can catch the whole family with one ``except`` clause.  Exceptions
raised by a step's own code are never wrapped and propagate unchanged.

Hierarchy::

    SpillwayError
      ├── MissingContextKey        ── required context key is absent
      ├── ContextTypeError         ── context value has the wrong type
      ├── UnregisteredStep         ── step name not in the registry
      ├── CircularDependencyError  ── dependency graph has a cycle
      └── MissingDependencyError   ── flow entry dependencies not in context
"""

from __future__ import annotations

from collections.abc import Iterable


class SpillwayError(Exception):
    """Base exception for all spillway errors."""


class MissingContextKey(SpillwayError, KeyError):
    """Raised by :meth:`SharedContext.require` when the key is absent."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Required context key '{key}' not found")

    def __str__(self) -> str:
        return str(self.args[0])


class ContextTypeError(SpillwayError, TypeError):
    """Raised when a context value is not an instance of the expected type."""

    def __init__(self, key: str, expected: type, actual: object) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Context key '{key}' holds {type(actual).__name__}, "
            f"expected {expected.__name__}"
        )


class UnregisteredStep(SpillwayError, LookupError):
    """Raised when one or more step names have no registered work."""

    def __init__(self, names: str | Iterable[str]) -> None:
        self.names: tuple[str, ...] = (
            (names,) if isinstance(names, str) else tuple(names)
        )
        super().__init__(f"Step not registered: {', '.join(self.names)}")


class CircularDependencyError(SpillwayError):
    """Raised when the dependency graph contains a cycle."""

    def __init__(self, node: str) -> None:
        self.node = node
        super().__init__(f"Circular dependency detected involving '{node}'")


class MissingDependencyError(SpillwayError):
    """Raised when a flow entry's dependencies are not yet in the context."""

    def __init__(self, step_name: str, missing: Iterable[str]) -> None:
        self.step_name = step_name
        self.missing: tuple[str, ...] = tuple(missing)
        super().__init__(
            f"Missing dependencies for '{step_name}': {', '.join(self.missing)}"
        )
