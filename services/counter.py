from __future__ import annotations

import logging

from persistence.preferences import KeyValueStore

logger = logging.getLogger(__name__)

COUNTER_KEY = "counter"


class CounterService:
    """A persisted integer counter. Reads 0 until something has been written."""

    def __init__(self, store: KeyValueStore, key: str = COUNTER_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def get_counter(self) -> int:
        value = self._store.get_int(self._key)
        return value if value is not None else 0

    def set_counter(self, value: int) -> bool:
        return self._store.set_int(self._key, value)

    def increment_counter(self) -> int:
        """Add one and return the counter as stored; unchanged if the store refused the write."""
        current = self.get_counter()
        if not self.set_counter(current + 1):
            logger.warning("Store refused to write counter %s; still %d", self._key, current)
            return current
        logger.debug("Counter %s incremented to %d", self._key, current + 1)
        return current + 1
