"""Write-once cache of the static, per-direction ring scaffolds.

Every ring has axis and polar templates that never vary with data. They are
built at most once per direction and handed out as shallow copies, so a
builder can replace whole entries without touching the cached template.
"""

from __future__ import annotations

import threading
from typing import Callable

from .logging_setup import get_logger
from .merge import Descriptor
from .records import Direction

logger = get_logger(__name__)


class ScaffoldCache:
    """Per-direction scaffold store guarded against concurrent first writes."""

    def __init__(
        self,
        name: str,
        factory: Callable[[Direction], Descriptor],
        *,
        eager: bool = False,
    ) -> None:
        self.name = name
        self._factory = factory
        self._entries: dict[Direction, Descriptor] = {}
        self._lock = threading.Lock()
        self.builds = 0
        if eager:
            self.warm()

    def get(self, direction: Direction) -> Descriptor:
        entry = self._entries.get(direction)
        if entry is None:
            with self._lock:
                entry = self._entries.get(direction)
                if entry is None:
                    entry = self._factory(direction)
                    self._entries[direction] = entry
                    self.builds += 1
                    logger.debug("Built %s scaffold for %s", self.name, direction.key)
        return entry

    def fresh(self, direction: Direction) -> Descriptor:
        """Return a shallow copy whose top-level lists can be reassigned freely."""

        return {
            key: list(value) if isinstance(value, list) else value
            for key, value in self.get(direction).items()
        }

    def warm(self) -> None:
        for direction in Direction:
            self.get(direction)
