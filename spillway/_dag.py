"""DAG visualization for dependency graphs."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, overload

from spillway._graph import DependencyGraph


@overload
def generate_dag(
    graph: DependencyGraph,
    *,
    format: Literal["mermaid"] = ...,
    output: None = ...,
) -> str: ...


@overload
def generate_dag(
    graph: DependencyGraph,
    *,
    format: Literal["mermaid"] = ...,
    output: str | Path,
) -> None: ...


def generate_dag(
    graph: DependencyGraph,
    *,
    format: Literal["mermaid"] = "mermaid",
    output: str | Path | None = None,
) -> str | None:
    """Generate a diagram for a dependency graph.

    Parameters
    ----------
    graph:
        The graph to render.  Edges point from dependency to dependent.
    format:
        Output format. Currently only ``"mermaid"`` is supported.
    output:
        Optional file path. When provided the diagram is written to this path
        and the function returns ``None``. Otherwise the diagram string is
        returned.

    Raises
    ------
    ValueError
        If *format* is not supported.
    """
    if format != "mermaid":
        raise ValueError(f"Unsupported format: {format!r}")

    lines: list[str] = ["graph TD"]
    edges = sorted((dep, node) for node, dep in graph.edges)
    connected = {name for edge in edges for name in edge}

    for src, dst in edges:
        lines.append(f"    {_node_id(src)} --> {_node_id(dst)}")
    # Isolated nodes have no edge to carry them; list them on their own.
    lines.extend(
        f"    {_node_id(name)}" for name in sorted(graph.nodes) if name not in connected
    )

    diagram = "\n".join(lines) + "\n"

    if output is not None:
        Path(output).write_text(diagram)
        return None

    return diagram


def _node_id(name: str) -> str:
    """Mermaid node ID for *name*, with the name itself as the label.

    Alphanumeric names are used as-is.  Any other character, underscore
    included, becomes ``_<hex codepoint>_`` so distinct names never share
    an ID.
    """
    if name.isascii() and name.isalnum():
        return name
    safe = "".join(
        ch if ch.isascii() and ch.isalnum() else f"_{ord(ch):x}_" for ch in name
    )
    label = name.replace('"', "#quot;")
    return f'{safe}["{label}"]'
