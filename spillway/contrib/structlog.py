"""structlog processor that injects the active flow and step into log entries.

Usage::

    import structlog
    from spillway.contrib.structlog import flow_processor

    structlog.configure(
        processors=[
            flow_processor,
            structlog.dev.ConsoleRenderer(),
        ]
    )

Every log entry emitted while a flow is executing includes a ``flow_id`` key
with the flow's correlation ID, plus ``flow`` and ``step`` when known.
"""

from __future__ import annotations

from typing import Any

from spillway._context import current_flow_id, current_flow_name, current_step_name


def flow_processor(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor adding ``flow_id``, ``flow`` and ``step``.

    Keys whose value is unknown are omitted rather than set to ``None``,
    keeping logs clean outside of flows.  Values already bound by the caller
    are left alone.
    """
    for key, value in (
        ("flow_id", current_flow_id()),
        ("flow", current_flow_name()),
        ("step", current_step_name()),
    ):
        if value is not None:
            event_dict.setdefault(key, value)
    return event_dict
