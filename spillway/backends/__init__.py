"""Tracing backends."""

from spillway.backends.base import TracingBackend
from spillway.backends.logging import LoggingBackend

__all__ = ["LoggingBackend", "TracingBackend"]
