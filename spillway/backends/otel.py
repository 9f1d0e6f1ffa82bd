"""OpenTelemetry tracing backend.

Requires ``opentelemetry-api`` and ``opentelemetry-sdk`` to be installed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from spillway._context import current_flow_id
from spillway.backends.base import TracingBackend

try:
    from opentelemetry import trace  # type: ignore[import-not-found]

    _HAS_OTEL = True
except ImportError:  # pragma: no cover
    _HAS_OTEL = False


class OTelBackend(TracingBackend):
    """Emits real OpenTelemetry spans for each flow step.

    Requires ``opentelemetry-api`` to be installed.  Raises
    :class:`RuntimeError` at construction time if the package is missing.
    Step exceptions are recorded on the span and re-raised unchanged.
    """

    def __init__(
        self, tracer_name: str = "spillway", tracer_provider: Any = None
    ) -> None:
        if not _HAS_OTEL:
            raise RuntimeError(
                "opentelemetry-api is required for OTelBackend. "
                "Install it with: pip install spillway[otel]"
            )
        self._tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)

    @contextmanager
    def span(self, step_name: str, flow_name: str, **attrs: Any) -> Iterator[None]:
        attributes = {"spillway.flow": flow_name, **attrs}
        flow_id = current_flow_id()
        if flow_id is not None:
            attributes["spillway.flow_id"] = flow_id
        with self._tracer.start_as_current_span(step_name, attributes=attributes):
            yield

    def get_correlation_id(self) -> str:
        span = trace.get_current_span()
        ctx = span.get_span_context()
        if ctx is not None and ctx.trace_id:
            return format(ctx.trace_id, "032x")
        return current_flow_id() or ""
