from __future__ import annotations

import copy
import threading
from typing import Any, Mapping

from .interfaces import KeyValueDocumentStore


class MemoryJsonDocumentStore(KeyValueDocumentStore):
    """
    In-memory stand-in for DiskJsonDocumentStore.

    The held document is copied on every load and save, so neither the code under
    test nor the test itself can mutate state behind the other's back. Seed it
    before handing it to a service, read it back afterwards to assert.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._lock = threading.RLock()
        self._doc: dict[str, Any] = copy.deepcopy(dict(initial)) if initial else {}
        self.save_count = 0

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def snapshot(self) -> dict[str, Any]:
        return self.load()

    def load(self) -> dict[str, Any]:
        with self._lock:
            return copy.deepcopy(self._doc)

    def save(self, doc: dict[str, Any]) -> None:
        with self._lock:
            self._doc = copy.deepcopy(doc)
            self.save_count += 1

    def seed(self, doc: Mapping[str, Any]) -> None:
        """Replace the held document without counting it as a save."""
        with self._lock:
            self._doc = copy.deepcopy(dict(doc))

    def clear(self) -> None:
        with self._lock:
            self._doc = {}
            self.save_count = 0
