"""Built-in combiners: merge policies for a composite's sources.

A combiner is any callable taking the composite and returning its resolved
value. Each one calls composite.get_sources() for a fresh snapshot, so
sorting never disturbs the composite's own ordering.

Priority sorts share one tie-break: a source without a priority always has
the weakest influence. Both sort orders put such sources first, so they
are folded in before the rest and are never the one picked from the end.

Operation tags (plain strings work too):
    Linear      Set, Add, Subtract, Multiply, Divide
    LinearTable Set, Insert, Remove, SetKey (with a "Key" tag)
"""

from __future__ import annotations

import copy
import numbers
import operator
import random as _random
from collections.abc import MutableMapping, MutableSequence, MutableSet, Mapping, Sequence, Set
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from flucts._sentinels import ABSENT
from flucts.errors import ArityError, InvalidConstructionError, UnsupportedTypeError

if TYPE_CHECKING:
    from flucts.composite import Composite
    from flucts.source import Source

Combiner = Callable[["Composite"], Any]


class Operation(str, Enum):
    SET = "Set"
    ADD = "Add"
    SUBTRACT = "Subtract"
    MULTIPLY = "Multiply"
    DIVIDE = "Divide"
    INSERT = "Insert"
    REMOVE = "Remove"
    SET_KEY = "SetKey"


_ARITHMETIC = {
    Operation.ADD: operator.add,
    Operation.SUBTRACT: operator.sub,
    Operation.MULTIPLY: operator.mul,
    Operation.DIVIDE: operator.truediv,
}

# ─── Configuration ──────────────────────────────────────────────────────────
_rng: _random.Random = _random.Random()


def set_random(rng: _random.Random) -> None:
    """Set the random number generator used by the random combiner.

    Tests pass a seeded random.Random to make picks deterministic.
    """
    global _rng
    _rng = rng


# ─── Helpers ────────────────────────────────────────────────────────────────


def _ascending(sources: list[Source]) -> list[Source]:
    sources.sort(key=lambda s: (s.priority is not None, s.priority if s.priority is not None else 0))
    return sources


def _descending(sources: list[Source]) -> list[Source]:
    """Highest priority first. Sources without a priority go before all of them."""
    ranked = sorted((s for s in sources if s.priority is not None), key=lambda s: s.priority, reverse=True)
    return [s for s in sources if s.priority is None] + ranked


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def _is_structured(value: Any) -> bool:
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (Mapping, Sequence, Set))


def _operation(source: Source) -> Operation | None:
    try:
        return Operation(source.get_tag("Operation"))
    except ValueError:
        return None


# ─── Combiners ──────────────────────────────────────────────────────────────


def linear(composite: Composite) -> Any:
    """Fold the sources over the default, lowest priority first.

    Set replaces the running value; Add/Subtract/Multiply/Divide apply the
    arithmetic operation and require both operands to be numbers.
    """
    value = composite.default
    for source in _ascending(composite.get_sources()):
        operand = source.read()
        op = _operation(source)
        if op is Operation.SET:
            value = operand
            continue
        if not _is_number(value) or not _is_number(operand):
            raise UnsupportedTypeError(
                f"Only numbers support add/sub/mul/div, got {type(value).__name__} "
                f"and {type(operand).__name__}"
            )
        fn = _ARITHMETIC.get(op)
        if fn is not None:
            value = fn(value, operand)
    return value


def all_true(composite: Composite) -> bool:
    """True when every source reads truthy (and when there are no sources)."""
    value: Any = True
    for source in composite.get_sources():
        value = value and source.read()
    return bool(value)


def any_true(composite: Composite) -> bool:
    """True when at least one source reads truthy."""
    value: Any = False
    for source in composite.get_sources():
        value = value or source.read()
    return bool(value)


def first_set(composite: Composite) -> Any:
    """The highest-priority source wins. ABSENT when there are no sources."""
    sources = _ascending(composite.get_sources())
    if not sources:
        return ABSENT
    return sources[-1].read()


def last_set(composite: Composite) -> Any:
    """The lowest-priority source wins. ABSENT when there are no sources."""
    sources = _descending(composite.get_sources())
    if not sources:
        return ABSENT
    return sources[-1].read()


def single(composite: Composite) -> Any:
    """The only source's value. More than one source is an error."""
    sources = composite.get_sources()
    if len(sources) > 1:
        raise ArityError(f"Single combiner expects at most 1 source, got {len(sources)}")
    if not sources:
        return ABSENT
    return sources[0].read()


def random(composite: Composite) -> Any:
    """A uniformly random source's value."""
    sources = composite.get_sources()
    if not sources:
        raise ArityError("Random combiner needs at least 1 source")
    return _rng.choice(sources).read()


def linear_table(composite: Composite) -> Any:
    """Apply structural operations to a copy of the default, lowest priority first.

    Sources without a tag map are skipped. Neither the default nor any
    source value is mutated.
    """
    value = composite.default
    if not _is_structured(value):
        raise UnsupportedTypeError(
            f"linear_table needs a structured default, got {type(value).__name__}"
        )
    value = copy.copy(value)

    for source in _ascending(composite.get_sources()):
        if source.tags is None:
            continue
        operand = source.read()
        op = _operation(source)
        if op is Operation.SET:
            if not _is_structured(operand):
                raise UnsupportedTypeError(
                    f"Set needs a structured value, got {type(operand).__name__}"
                )
            value = copy.copy(operand)
        elif op is Operation.INSERT:
            if isinstance(value, MutableSequence):
                value.append(operand)
            elif isinstance(value, MutableSet):
                value.add(operand)
            else:
                raise UnsupportedTypeError(f"Cannot insert into {type(value).__name__}")
        elif op is Operation.REMOVE:
            if isinstance(value, MutableSequence):
                if operand in value:
                    value.remove(operand)
            elif isinstance(value, MutableSet):
                value.discard(operand)
            else:
                raise UnsupportedTypeError(f"Cannot remove from {type(value).__name__}")
        elif op is Operation.SET_KEY:
            key = source.get_tag("Key")
            if key is ABSENT:
                continue
            if not isinstance(value, (MutableMapping, MutableSequence)):
                raise UnsupportedTypeError(f"Cannot set a key on {type(value).__name__}")
            try:
                value[key] = operand
            except (IndexError, TypeError) as exc:
                raise UnsupportedTypeError(f"Cannot set key {key!r} on {type(value).__name__}") from exc
    return value


BUILTIN: dict[str, Combiner] = {
    "linear": linear,
    "all_true": all_true,
    "any_true": any_true,
    "first_set": first_set,
    "last_set": last_set,
    "single": single,
    "random": random,
    "linear_table": linear_table,
}


def get_combiner(combiner: str | Combiner | None) -> Combiner:
    """Resolve a built-in name or pass a callable through."""
    if combiner is None:
        raise InvalidConstructionError("Composite requires a combiner")
    if isinstance(combiner, str):
        try:
            return BUILTIN[combiner]
        except KeyError:
            raise InvalidConstructionError(f"Unknown combiner {combiner!r}") from None
    if not callable(combiner):
        raise InvalidConstructionError(f"Combiner must be callable, got {type(combiner).__name__}")
    return combiner
