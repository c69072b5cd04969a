"""Frozen blocks: batch source mutations by halting composites.

Inside a frozen block every given composite is halted, so source changes
only mark it dirty. On exit each composite gets back the halted flag it had
before, and the ones that are active and dirty again are read once. Each
composite therefore fires value_changed at most once per block.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from flucts.composite import Composite

P = ParamSpec("P")
R = TypeVar("R")


@contextmanager
def frozen(*composites: Composite, settle: bool = True) -> Iterator[None]:
    """Context manager for batching mutations.

    Usage:
        with frozen(speed, color):
            boost.update(2.0)
            tint.update("red")
            # speed and color resolve here, once each
    """
    previous = [(c, c.halted) for c in composites]
    for c in composites:
        c.halt(True)
    try:
        yield
    finally:
        for c, was_halted in reversed(previous):
            c.halt(was_halted)
    # Not reached when the block raised.
    if settle:
        for c in composites:
            if c.dirty and not c.halted:
                c.read()


def freezing(*composites: Composite, settle: bool = True) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator: run the function inside frozen(*composites).

    Usage:
        @freezing(speed)
        def apply_buffs():
            haste.update(1.5)
            slow.update(0.5)
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            with frozen(*composites, settle=settle):
                return fn(*args, **kwargs)

        return wrapper

    return decorator
