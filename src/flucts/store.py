"""Store: a keyed registry of named composites.

The schema maps each name to (default, combiner). reconcile() supports
schema evolution: new names get fresh composites, existing composites keep
their sources and cached values.
"""

from __future__ import annotations

import logging
from typing import Any

from flucts.combiners import Combiner
from flucts.composite import Composite
from flucts.freeze import frozen
from flucts.source import Source

logger = logging.getLogger("flucts.store")

Schema = dict[str, tuple[Any, "str | Combiner"]]


class Store:
    """Named Composite container."""

    def __init__(self, schema: Schema) -> None:
        self._composites: dict[str, Composite] = {}
        for name, (default, combiner) in schema.items():
            self._composites[name] = Composite(default, combiner)

    def get(self, name: str) -> Any:
        composite = self._composites.get(name)
        return composite.read() if composite is not None else None

    def __getitem__(self, name: str) -> Composite:
        return self._composites[name]

    def __contains__(self, name: object) -> bool:
        return name in self._composites

    def keys(self):
        return self._composites.keys()

    def add_source(self, name: str, source: Source) -> Composite:
        return self._composites[name].add_source(source)

    def remove_source(self, name: str, source: Source) -> Composite:
        return self._composites[name].remove_source(source)

    def halt(self, halted: bool = True) -> None:
        for composite in self._composites.values():
            composite.halt(halted)

    def frozen(self, *, settle: bool = True):
        """frozen() over every composite in the store."""
        return frozen(*self._composites.values(), settle=settle)

    def reconcile(self, schema: Schema) -> list[str]:
        """Add composites for names not seen before. Returns the added names."""
        added = []
        for name, (default, combiner) in schema.items():
            if name not in self._composites:
                self._composites[name] = Composite(default, combiner)
                added.append(name)
        logger.info("Reconciled: %d new keys, %d total", len(added), len(self._composites))
        return added

    def dispose(self) -> None:
        """Detach every source from every composite. Sources stay alive."""
        for composite in self._composites.values():
            with frozen(composite, settle=False):
                for source in composite.get_sources():
                    composite.remove_source(source)
