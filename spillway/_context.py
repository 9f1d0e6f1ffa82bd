"""Shared step context and active-run propagation via contextvars."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, TypeVar, overload

from spillway._errors import ContextTypeError, MissingContextKey
from spillway._types import Listener

logger = logging.getLogger("spillway")

T = TypeVar("T")


class SharedContext:
    """Mutable key/value store shared by every step of a flow.

    Keys form a flat namespace; dotted names such as ``"build.info"`` are a
    convention only.  Setting a key fires that key's listeners synchronously,
    in registration order, with ``(new_value, previous_value)``.

    There is no locking.  Steps running in the same parallel group that write
    the same key race, and the last write wins.
    """

    __slots__ = ("_data", "_listeners", "correlation_id")

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self.correlation_id: str = correlation_id or uuid.uuid4().hex
        self._data: dict[str, Any] = dict(data) if data is not None else {}
        self._listeners: dict[str, list[Listener]] = {}

    # -- writes ---------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key* and notify the key's listeners.

        Listeners fire on every call, even when the value is unchanged.
        """
        previous = self._data.get(key)
        self._data[key] = value
        logger.debug("context.set", extra={"key": key})
        for listener in list(self._listeners.get(key, ())):
            listener(value, previous)

    def set_many(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def on_change(self, key: str, listener: Listener) -> None:
        """Register *listener* to be called whenever *key* is set."""
        self._listeners.setdefault(key, []).append(listener)

    def clear(self) -> None:
        """Drop all values and all listeners."""
        self._data.clear()
        self._listeners.clear()

    # -- reads ----------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    @overload
    def require(self, key: str) -> Any: ...

    @overload
    def require(self, key: str, expected_type: type[T]) -> T: ...

    def require(self, key: str, expected_type: type[Any] | None = None) -> Any:
        """Return the value for *key*.

        Raises :class:`MissingContextKey` if the key is absent, and
        :class:`ContextTypeError` if *expected_type* is given and the value
        is not an instance of it.
        """
        if key not in self._data:
            raise MissingContextKey(key)
        value = self._data[key]
        if expected_type is not None and not isinstance(value, expected_type):
            raise ContextTypeError(key, expected_type, value)
        return value

    def get_as(
        self, key: str, expected_type: type[T], default: T | None = None
    ) -> T | None:
        """Like :meth:`get`, but validate the stored value's type."""
        if key not in self._data:
            return default
        return self.require(key, expected_type)

    def has(self, key: str) -> bool:
        return key in self._data

    def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return a mapping of the requested keys that are present."""
        return {key: self._data[key] for key in keys if key in self._data}

    def keys(self) -> list[str]:
        return list(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the current mapping."""
        return dict(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"SharedContext(keys={self.keys()!r})"


# ---------------------------------------------------------------------------
# ContextVars holding the active flow run (None when outside a flow)
# ---------------------------------------------------------------------------

_flow_id_var: ContextVar[str | None] = ContextVar("spillway_flow_id", default=None)
_flow_name_var: ContextVar[str | None] = ContextVar(
    "spillway_flow_name", default=None
)
_step_name_var: ContextVar[str | None] = ContextVar(
    "spillway_step_name", default=None
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


@contextmanager
def _active_flow(flow_name: str, context: SharedContext) -> Iterator[None]:
    """Mark *context*'s correlation ID as the active flow for the block."""
    id_token = _flow_id_var.set(context.correlation_id)
    name_token = _flow_name_var.set(flow_name)
    try:
        yield
    finally:
        _flow_name_var.reset(name_token)
        _flow_id_var.reset(id_token)


@contextmanager
def _active_step(step_name: str) -> Iterator[None]:
    """Mark *step_name* as running in the current task for the block."""
    token = _step_name_var.set(step_name)
    try:
        yield
    finally:
        _step_name_var.reset(token)


def _reset_active() -> None:
    """Clear all active-run state. Intended for testing."""
    _flow_id_var.set(None)
    _flow_name_var.set(None)
    _step_name_var.set(None)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def current_flow_id() -> str | None:
    """Return the correlation ID of the executing flow, or ``None``."""
    return _flow_id_var.get()


def current_flow_name() -> str | None:
    """Return the name of the executing flow, or ``None``."""
    return _flow_name_var.get()


def current_step_name() -> str | None:
    """Return the name of the step running in this task, or ``None``."""
    return _step_name_var.get()
