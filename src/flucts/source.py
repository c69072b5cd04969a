"""Sources: individually updatable contributors to a composite's value.

A Source holds either a literal value or a compute function (a def,
lambda, bound method or functools.partial). Compute functions are called
with the source on every read() and never cached.
Whenever the stored value changes, value_changed fires with the new value.
dispose() fires DISPOSED on the same signal so owning composites detach.
"""

from __future__ import annotations

import functools
import logging
import types
from typing import Any, Callable

from flucts._sentinels import ABSENT, DISPOSED
from flucts.errors import InvalidConstructionError
from flucts.signal import Signal, Subscription

logger = logging.getLogger("flucts.source")

# Only these are treated as compute functions. Classes and callable objects
# stored as a value are returned as-is.
_COMPUTE_TYPES = (types.FunctionType, types.MethodType, types.BuiltinFunctionType, functools.partial)


class Source:
    """A single contributor with an optional priority and an open tag map."""

    __slots__ = ("_value", "_priority", "_tags", "_binding", "value_changed")

    def __init__(
        self,
        value: Any = ABSENT,
        *,
        priority: float | None = None,
        tags: dict[str, Any] | None = None,
        signal: Signal | None = None,
    ) -> None:
        if value is ABSENT or value is DISPOSED:
            raise InvalidConstructionError("Source requires an initial value")
        self._value = value
        self._priority = priority
        self._tags = dict(tags) if tags is not None else None
        self._binding: Subscription | None = None
        self.value_changed = Signal()
        if signal is not None:
            self.bind_to_event(signal)

    @property
    def value(self) -> Any:
        """The stored value. May be a compute function; use read() for the effective value."""
        return self._value

    @property
    def priority(self) -> float | None:
        return self._priority

    @property
    def tags(self) -> dict[str, Any] | None:
        return self._tags

    @property
    def disposed(self) -> bool:
        return self._value is DISPOSED

    def read(self) -> Any:
        """Return the effective value, calling the compute function if there is one."""
        if isinstance(self._value, _COMPUTE_TYPES):
            return self._value(self)
        return self._value

    def update(self, value: Any) -> None:
        """Replace the stored value. Fires value_changed only if it actually changed."""
        if value is DISPOSED:
            raise ValueError("DISPOSED is reserved for Source.dispose()")
        self._set(value)

    def _set(self, value: Any) -> None:
        old = self._value
        self._value = value
        if old is not value and old != value:
            self.value_changed.fire(value)

    # --- External bindings ---

    def bind_to_event(self, signal: Signal) -> Subscription:
        """Update from the first payload value of every firing of signal.

        Replaces any previous binding.
        """
        self.unbind()
        self._binding = signal.subscribe(lambda value, *_: self.update(value))
        return self._binding

    def bind_to_predicate(self, signal: Signal, predicate: Callable[..., Any]) -> Subscription:
        """Update from predicate(*payload) on every firing of signal.

        A predicate returning ABSENT declines that firing: nothing is updated
        and nothing fires. Replaces any previous binding.

        Usage:
            stunned = Signal()
            speed = Source(1.0, tags={"Operation": "Multiply"})
            speed.bind_to_predicate(stunned, lambda on: 0.0 if on else 1.0)
        """
        self.unbind()

        def _on_fire(*payload: Any) -> None:
            value = predicate(*payload)
            if value is not ABSENT:
                self.update(value)

        self._binding = signal.subscribe(_on_fire)
        return self._binding

    def unbind(self) -> None:
        """Release the external binding, if any."""
        if self._binding is not None:
            self._binding.unsubscribe()
            self._binding = None

    # --- Tags ---

    def get_tag(self, name: str, default: Any = ABSENT) -> Any:
        if self._tags is None:
            return default
        return self._tags.get(name, default)

    def add_tag(self, name: str, value: Any) -> None:
        if self._tags is None:
            self._tags = {}
        self._tags[name] = value

    def remove_tag(self, name: str) -> None:
        if self._tags is not None:
            self._tags.pop(name, None)

    def dispose(self) -> None:
        """Announce disposal to every owning composite, then release the binding.

        If an owner raises while resolving without this source, the error
        propagates after all owners have detached and the binding is released.
        """
        if self._value is DISPOSED:
            return
        logger.debug("Disposing %r", self)
        self._value = DISPOSED
        try:
            # Every owner must detach, even if one of them fails to resolve.
            self.value_changed.broadcast(DISPOSED)
        finally:
            self.unbind()

    def __repr__(self) -> str:
        parts = [repr(self._value)]
        if self._priority is not None:
            parts.append(f"priority={self._priority!r}")
        if self._tags:
            parts.append(f"tags={self._tags!r}")
        return f"Source({', '.join(parts)})"
