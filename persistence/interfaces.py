from __future__ import annotations

import threading
from typing import Any, Protocol


class KeyValueDocumentStore(Protocol):
    """
    Minimal backend interface: a single JSON-like document persisted as a whole.

    Both the preferences store and the document store sit on top of one of these,
    so swapping disk for memory never changes their semantics.
    """

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding a load/modify/save cycle against this backend."""
        ...

    def load(self) -> dict[str, Any]:
        """Load and return the full document (never None)."""
        ...

    def save(self, doc: dict[str, Any]) -> None:
        """Persist the full document atomically."""
        ...
