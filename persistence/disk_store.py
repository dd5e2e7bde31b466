from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from .interfaces import KeyValueDocumentStore
from .locks import GLOBAL_PATH_LOCKS

logger = logging.getLogger(__name__)


class DiskJsonDocumentStore(KeyValueDocumentStore):
    """
    Stores a single JSON object on disk at a fixed path.

    - Missing, empty, undecodable or non-object files load as {}.
    - Saves go to a uniquely named sibling temp file, are fsynced, then renamed
      over the target, so a reader sees either the old or the new document.
    """

    def __init__(self, path: Path, *, indent: int = 2):
        self._path = path
        self._indent = indent

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock(self) -> threading.RLock:
        return GLOBAL_PATH_LOCKS.lock_for(self._path)

    def load(self) -> dict[str, Any]:
        with self.lock:
            try:
                raw = self._path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return {}
        if not raw.strip():
            return {}
        try:
            doc = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring undecodable JSON document at %s", self._path)
            return {}
        if not isinstance(doc, dict):
            logger.warning("Ignoring non-object JSON document at %s", self._path)
            return {}
        return doc

    def save(self, doc: dict[str, Any]) -> None:
        payload = json.dumps(doc, indent=self._indent, sort_keys=True) + "\n"
        with self.lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        logger.debug("Saved %s", self._path)
