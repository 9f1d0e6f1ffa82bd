"""Global configuration: tracing backend and dependency strictness (thread-safe)."""

from __future__ import annotations

import threading

from spillway.backends.base import TracingBackend

_lock = threading.Lock()
_backend: TracingBackend | None = None
_configured = False
_strict_dependencies = False


def configure(
    backend: TracingBackend | str | None = "auto",
    *,
    strict_dependencies: bool | None = None,
) -> None:
    """Set global spillway options.

    *backend* can be:
    - A :class:`TracingBackend` instance
    - ``"logging"``: use the built-in :class:`LoggingBackend`
    - ``"otel"``: use :class:`OTelBackend` (requires ``opentelemetry-api``)
    - ``"auto"``: try OTel, fall back to logging
    - ``None``: leave the current backend untouched

    *strict_dependencies*, when not ``None``, sets the default phantom-node
    policy for :class:`~spillway.DependencyGraph` instances created without
    an explicit ``strict`` argument.
    """
    global _backend, _configured, _strict_dependencies
    with _lock:
        if strict_dependencies is not None:
            _strict_dependencies = strict_dependencies
        if backend is None:
            return
        if isinstance(backend, TracingBackend):
            _backend = backend
        elif backend == "logging":
            from spillway.backends.logging import LoggingBackend

            _backend = LoggingBackend()
        elif backend == "otel":
            from spillway.backends.otel import OTelBackend

            _backend = OTelBackend()
        elif backend == "auto":
            _backend = _auto_detect()
        else:
            raise ValueError(f"Unknown backend: {backend!r}")
        _configured = True


def get_backend() -> TracingBackend:
    """Return the configured backend, auto-detecting on first call."""
    global _backend, _configured
    if _configured:
        assert _backend is not None
        return _backend
    with _lock:
        if _configured:
            assert _backend is not None
            return _backend
        _backend = _auto_detect()
        _configured = True
        return _backend


def strict_dependencies() -> bool:
    """Return the default phantom-node policy for dependency graphs."""
    return _strict_dependencies


def reset() -> None:
    """Reset configuration to the unconfigured state. Intended for testing."""
    global _backend, _configured, _strict_dependencies
    with _lock:
        _backend = None
        _configured = False
        _strict_dependencies = False


def _auto_detect() -> TracingBackend:
    """Try to import OTel; fall back to LoggingBackend."""
    try:
        from spillway.backends.otel import OTelBackend

        return OTelBackend()
    except RuntimeError:
        from spillway.backends.logging import LoggingBackend

        return LoggingBackend()
