"""Dependency graph of step names and its topological-order resolver."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from spillway._config import strict_dependencies
from spillway._errors import CircularDependencyError, UnregisteredStep


class DependencyGraph:
    """Directed graph of "depends-on" edges between step names.

    A node created only as the target of :meth:`add_dependency` is a
    *phantom*: nothing registered it as real work.  Phantoms are treated as
    always-satisfied no-op nodes unless the graph is *strict*, in which case
    :meth:`resolve_order` raises :class:`UnregisteredStep` for them.  When
    *strict* is ``None`` the global ``configure(strict_dependencies=...)``
    setting applies at resolve time.
    """

    def __init__(self, strict: bool | None = None) -> None:
        self.strict = strict
        # dict keeps insertion order; values are the node's direct dependencies
        self._deps: dict[str, dict[str, None]] = {}
        self._phantoms: set[str] = set()

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, Iterable[str]],
        strict: bool | None = None,
    ) -> DependencyGraph:
        """Build a graph from ``{node: [dependency, ...]}``."""
        graph = cls(strict=strict)
        for node, deps in mapping.items():
            graph.add_node(node)
            for dep in deps:
                graph.add_dependency(node, dep)
        return graph

    def add_node(self, name: str) -> None:
        """Add *name* as a real node. Idempotent; promotes a phantom."""
        self._deps.setdefault(name, {})
        self._phantoms.discard(name)

    def add_dependency(self, node: str, depends_on: str) -> None:
        """Record that *node* depends on *depends_on*.

        *node* becomes a real node.  *depends_on* is created as a phantom if
        it is not already in the graph.
        """
        self.add_node(node)
        if depends_on not in self._deps:
            self._deps[depends_on] = {}
            self._phantoms.add(depends_on)
        self._deps[node][depends_on] = None

    @property
    def nodes(self) -> list[str]:
        return list(self._deps)

    @property
    def edges(self) -> list[tuple[str, str]]:
        """``(dependent, dependency)`` pairs in insertion order."""
        return [(node, dep) for node, deps in self._deps.items() for dep in deps]

    def dependencies_of(self, name: str) -> list[str]:
        """Direct dependencies of *name*. Raises ``KeyError`` if unknown."""
        return list(self._deps[name])

    def is_phantom(self, name: str) -> bool:
        return name in self._phantoms

    @property
    def phantoms(self) -> list[str]:
        return [name for name in self._deps if name in self._phantoms]

    def resolve_order(self) -> list[str]:
        """Return every node, each placed after all of its dependencies.

        Raises :class:`CircularDependencyError` naming the node at which a
        cycle was detected, and :class:`UnregisteredStep` for phantom nodes
        when the graph is strict.
        """
        strict = self.strict if self.strict is not None else strict_dependencies()
        if strict and self._phantoms:
            raise UnregisteredStep(self.phantoms)

        visited: set[str] = set()
        visiting: set[str] = set()
        order: list[str] = []

        def visit(root: str) -> None:
            # Explicit stack of (node, remaining dependencies) frames; deep
            # chains must not hit the interpreter's recursion limit.
            visiting.add(root)
            stack: list[tuple[str, Iterator[str]]] = [(root, iter(self._deps[root]))]
            while stack:
                node, pending = stack[-1]
                for dep in pending:
                    if dep in visiting:
                        raise CircularDependencyError(dep)
                    if dep not in visited:
                        visiting.add(dep)
                        stack.append((dep, iter(self._deps[dep])))
                        break
                else:
                    stack.pop()
                    visiting.discard(node)
                    visited.add(node)
                    order.append(node)

        for node in self._deps:
            if node not in visited:
                visit(node)
        return order

    def __contains__(self, name: object) -> bool:
        return name in self._deps

    def __iter__(self) -> Iterator[str]:
        return iter(self._deps)

    def __len__(self) -> int:
        return len(self._deps)
