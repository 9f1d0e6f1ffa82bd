"""Thread-safe step registry mapping step names to their handlers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from spillway._decorators import declared_steps
from spillway._types import StepRecord

logger = logging.getLogger("spillway")


class StepRegistry:
    """Stores step records and looks them up by name.

    Registering a name twice silently replaces the earlier record.  Lookups
    never raise; absence is reported as ``None`` and callers decide whether
    that is an error.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._steps: dict[str, StepRecord] = {}

    def register_instance(self, owner: Any) -> list[str]:
        """Register every step declared on *owner* with ``@step``.

        Returns the registered step names in declaration order.
        """
        names: list[str] = []
        for step_name, attr_name, metadata in declared_steps(owner):
            self._store(
                StepRecord(
                    name=step_name, owner=owner, method=attr_name, metadata=metadata
                )
            )
            names.append(step_name)
        return names

    def register_step(
        self,
        name: str,
        owner: Any,
        method: str | Callable[..., Any],
        **metadata: Any,
    ) -> StepRecord:
        """Register a single step.

        *method* is an attribute name on *owner*, or a callable that takes the
        shared context (in which case *owner* may be ``None``).
        """
        if isinstance(method, str) and not callable(getattr(owner, method, None)):
            raise TypeError(f"{type(owner).__name__} has no callable '{method}'")
        record = StepRecord(
            name=name,
            owner=owner,
            method=method,
            metadata={"name": name, "parallel": False, **metadata},
        )
        self._store(record)
        return record

    def get_step(self, name: str) -> StepRecord | None:
        with self._lock:
            return self._steps.get(name)

    def list_steps(self) -> list[str]:
        """Return all registered step names in registration order."""
        with self._lock:
            return list(self._steps)

    def find_steps(self, pattern: str) -> list[str]:
        """Return the registered names containing *pattern* as a substring."""
        with self._lock:
            return [name for name in self._steps if pattern in name]

    def clear(self) -> None:
        """Remove all registered steps. Intended for testing."""
        with self._lock:
            self._steps.clear()

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._steps

    def __len__(self) -> int:
        with self._lock:
            return len(self._steps)

    def _store(self, record: StepRecord) -> None:
        with self._lock:
            if record.name in self._steps:
                logger.debug("registry.replace", extra={"step": record.name})
            self._steps[record.name] = record


default_registry = StepRegistry()
