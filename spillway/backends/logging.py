"""Logging-based tracing backend (zero external dependencies)."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from spillway._context import current_flow_id
from spillway.backends.base import TracingBackend

logger = logging.getLogger("spillway")


class LoggingBackend(TracingBackend):
    """Emits structured log records for each span start/end."""

    @contextmanager
    def span(self, step_name: str, flow_name: str, **attrs: Any) -> Iterator[None]:
        extra = {
            "flow": flow_name,
            "step": step_name,
            "correlation_id": self.get_correlation_id(),
            **attrs,
        }
        logger.info("step.start", extra=extra)
        start = time.monotonic()
        status = "error"
        try:
            yield
            status = "ok"
        finally:
            duration_ms = (time.monotonic() - start) * 1000
            logger.info(
                "step.end",
                extra={**extra, "duration_ms": duration_ms, "status": status},
            )

    def get_correlation_id(self) -> str:
        return current_flow_id() or ""
