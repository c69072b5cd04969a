"""Process-wide marker values.

ABSENT means "no value": unset tag lookups, a predicate declining a firing,
a combiner with nothing to return. DISPOSED travels through a source's
value_changed signal when the source is torn down.

Both are instances of a private class, so no application value can ever
compare equal to them.
"""

from __future__ import annotations


class _Marker:
    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return f"<{self._name}>"

    def __copy__(self) -> _Marker:
        return self

    def __deepcopy__(self, memo) -> _Marker:
        return self


ABSENT = _Marker("ABSENT")
DISPOSED = _Marker("DISPOSED")
