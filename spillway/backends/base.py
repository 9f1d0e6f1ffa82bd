"""Abstract base class for tracing backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class TracingBackend(ABC):
    """Interface that all spillway tracing backends must implement.

    The builder and executor wrap every step they run in :meth:`span`.
    Exceptions raised inside the span must propagate unchanged.
    """

    @abstractmethod
    @contextmanager
    def span(self, step_name: str, flow_name: str, **attrs: Any) -> Iterator[None]:
        """Open a tracing span for the duration of a step."""

    @abstractmethod
    def get_correlation_id(self) -> str:
        """Return the current correlation ID."""
