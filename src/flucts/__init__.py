"""flucts: values resolved from many competing sources."""

from importlib.metadata import version as _version

__version__ = _version("flucts")

from flucts._sentinels import ABSENT, DISPOSED
from flucts.errors import (
    ArityError,
    FluctsError,
    InvalidConstructionError,
    InvalidStateError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from flucts.signal import Signal, Subscription
from flucts.source import Source
from flucts.composite import Composite
from flucts.combiners import Operation, get_combiner, set_random
from flucts import combiners
from flucts.freeze import frozen, freezing
from flucts.store import Store

__all__ = [
    "ABSENT",
    "DISPOSED",
    "FluctsError",
    "InvalidConstructionError",
    "InvalidStateError",
    "TypeMismatchError",
    "UnsupportedTypeError",
    "ArityError",
    "Signal",
    "Subscription",
    "Source",
    "Composite",
    "Operation",
    "combiners",
    "get_combiner",
    "set_random",
    "frozen",
    "freezing",
    "Store",
]
