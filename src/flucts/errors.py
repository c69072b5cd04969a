"""Exceptions raised by flucts.

Every error is raised synchronously to the immediate caller. A composite
never caches the result of a failed resolve, it stays dirty instead.
"""


class FluctsError(Exception):
    """Base class for all flucts errors."""


class InvalidConstructionError(FluctsError, ValueError):
    """A Source or Composite was created without a mandatory argument."""


class InvalidStateError(FluctsError, RuntimeError):
    """resolve() was called on a halted composite."""


class TypeMismatchError(FluctsError, TypeError):
    """A combiner returned a value of a different kind than the default."""


class UnsupportedTypeError(FluctsError, TypeError):
    """A combiner received an operand it cannot work with."""


class ArityError(FluctsError, ValueError):
    """A combiner was given the wrong number of sources."""
