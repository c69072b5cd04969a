"""Composites: values resolved from many sources by a combiner.

A Composite subscribes to each attached source's value_changed signal.
While active, every change resolves immediately; while halted, changes only
mark the composite dirty and read() keeps returning the frozen value.
value_changed fires only when a resolve produces a different value.

Reentrancy is not guarded: a combiner or change handler that mutates a
source of the composite being resolved can recurse without bound. Keeping
those paths acyclic is the caller's job.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Mapping, Sequence, Set
from typing import Any

from flucts._sentinels import ABSENT, DISPOSED
from flucts.combiners import Combiner, get_combiner
from flucts.errors import InvalidConstructionError, InvalidStateError, TypeMismatchError
from flucts.signal import Signal, Subscription
from flucts.source import Source

logger = logging.getLogger("flucts.composite")


def value_kind(value: Any) -> object:
    """Classify a value for the resolve type check.

    All numbers are one kind, as are all structured values, so an int
    default accepts a float result and a list default accepts a tuple.
    """
    if value is ABSENT or value is DISPOSED or value is None:
        return value
    if isinstance(value, bool):
        return bool
    if isinstance(value, numbers.Number):
        return numbers.Number
    if isinstance(value, str):
        return str
    if isinstance(value, (Mapping, Sequence, Set)):
        return "structured"
    if callable(value):
        return "callable"
    return type(value)


def _kind_name(kind: object) -> str:
    return getattr(kind, "__name__", None) or str(kind)


class _Entry:
    """A source plus the subscriptions this composite holds on it."""

    __slots__ = ("source", "subscriptions")

    def __init__(self, source: Source) -> None:
        self.source = source
        self.subscriptions: list[Subscription] = []

    def release(self) -> None:
        for sub in self.subscriptions:
            sub.unsubscribe()
        self.subscriptions.clear()


class Composite:
    """A lazily resolved value combining every attached source."""

    __slots__ = (
        "_value",
        "_default",
        "_combiner",
        "_entries",
        "_halted",
        "_dirty",
        "_properties",
        "value_changed",
    )

    def __init__(
        self,
        default: Any = ABSENT,
        combiner: str | Combiner | None = None,
        *,
        properties: dict[str, Any] | None = None,
    ) -> None:
        if default is ABSENT or default is DISPOSED:
            raise InvalidConstructionError("Composite requires a default value")
        self._combiner = get_combiner(combiner)
        self._default = default
        self._value = default
        self._entries: list[_Entry] = []
        self._halted = False
        self._dirty = False
        self._properties = dict(properties) if properties is not None else None
        self.value_changed = Signal()

    @property
    def default(self) -> Any:
        return self._default

    @property
    def combiner(self) -> Combiner:
        return self._combiner

    @property
    def halted(self) -> bool:
        return self._halted

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def properties(self) -> dict[str, Any] | None:
        return self._properties

    # --- Sources ---

    def add_source(self, source: Source) -> Composite:
        """Attach source and resolve (or mark dirty while halted)."""
        entry = _Entry(source)
        self._entries.append(entry)
        entry.subscriptions.append(
            source.value_changed.subscribe(lambda value: self._on_source_changed(source, value))
        )
        self._invalidate()
        return self

    def remove_source(self, source: Source) -> Composite:
        """Detach the first entry for source and resolve (or mark dirty while halted)."""
        for index, entry in enumerate(self._entries):
            if entry.source is source:
                del self._entries[index]
                entry.release()
                break
        self._invalidate()
        return self

    def get_sources(self) -> list[Source]:
        """Snapshot of the attached sources. Safe to sort."""
        return [entry.source for entry in self._entries]

    def _on_source_changed(self, source: Source, value: Any) -> None:
        if value is DISPOSED:
            logger.debug("Detaching disposed source %r from %r", source, self)
            self.remove_source(source)
            return
        self._invalidate()

    def _invalidate(self) -> None:
        if self._halted:
            self._dirty = True
        else:
            self.resolve()

    # --- Resolution ---

    def resolve(self) -> Composite:
        """Run the combiner and cache its result. Fires value_changed on change."""
        if self._halted:
            self._dirty = True
            raise InvalidStateError(f"Cannot resolve a halted composite ({self!r})")

        self._dirty = False
        try:
            result = self._combiner(self)
        except Exception:
            self._dirty = True
            raise

        expected, got = value_kind(self._default), value_kind(result)
        if expected != got:
            self._dirty = True
            raise TypeMismatchError(
                f"Could not resolve composite: {_kind_name(expected)} expected, "
                f"got {_kind_name(got)}"
            )

        previous = self._value
        self._value = result
        if previous is not result and previous != result:
            logger.debug("Resolved %r -> %r", previous, result)
            self.value_changed.fire(result)
        return self

    def read(self) -> Any:
        """Return the resolved value, resolving first if dirty and not halted."""
        if self._dirty and not self._halted:
            self.resolve()
        return self._value

    def halt(self, halted: bool = True) -> Composite:
        """Freeze (or unfreeze) resolution. Unfreezing does not resolve by itself."""
        self._halted = bool(halted)
        return self

    def set_properties(self, values: dict[str, Any]) -> Composite:
        """Merge values into properties. Never triggers a resolve."""
        if self._properties is None:
            self._properties = {}
        self._properties.update(values)
        return self

    # --- Container protocol ---

    def __contains__(self, source: object) -> bool:
        return any(entry.source is source for entry in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        state = "dirty" if self._dirty else "clean"
        if self._halted:
            state += ", halted"
        return f"Composite({self._value!r}, {state}, {len(self._entries)} sources)"
