"""Declarative step marking: ``@step`` and :func:`declared_steps`."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, overload

from spillway._types import P, R

_STEP_MARKER = "__spillway_step__"


# ---------------------------------------------------------------------------
# @step
# ---------------------------------------------------------------------------


@overload
def step(fn: Callable[P, R]) -> Callable[P, R]: ...


@overload
def step(
    *,
    name: str | None = ...,
    parallel: bool = ...,
    **metadata: Any,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def step(
    fn: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    parallel: bool = False,
    **metadata: Any,
) -> Any:
    """Mark a method as a step.

    Can be used bare (``@step``) or with arguments
    (``@step(name="git.checkout")``).  Marking does not register anything;
    pass an instance to :meth:`StepRegistry.register_instance` for that.
    """
    if fn is not None:
        return _mark(fn, name=None, parallel=False, metadata={})

    def decorator(f: Callable[..., Any]) -> Callable[..., Any]:
        return _mark(f, name=name, parallel=parallel, metadata=metadata)

    return decorator


def _mark(
    fn: Callable[..., Any],
    *,
    name: str | None,
    parallel: bool,
    metadata: dict[str, Any],
) -> Callable[..., Any]:
    setattr(
        fn,
        _STEP_MARKER,
        {
            **metadata,
            "name": name or fn.__name__,
            "parallel": parallel,
        },
    )
    return fn


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def declared_steps(owner: Any) -> list[tuple[str, str, dict[str, Any]]]:
    """Return the ``(step_name, attribute_name, metadata)`` table of *owner*.

    Walks the class hierarchy so steps declared on base classes are found;
    a subclass attribute shadows the base one of the same name.
    """
    cls = owner if isinstance(owner, type) else type(owner)
    seen: set[str] = set()
    table: list[tuple[str, str, dict[str, Any]]] = []
    for klass in cls.__mro__:
        for attr_name, obj in vars(klass).items():
            if attr_name in seen:
                continue
            seen.add(attr_name)
            marker = getattr(obj, _STEP_MARKER, None)
            if marker is not None:
                table.append(
                    (marker["name"], attr_name, {**marker, "method": attr_name})
                )
    return table
